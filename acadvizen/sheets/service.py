"""Best-effort mirror of registrations into a Google Sheet (Sheets API v4)."""

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from acadvizen.core.result import service_operation
from acadvizen.exceptions import DependencyFailure, ResourceNotFoundError
from acadvizen.store.gateway import EntityStore, ListOptions
from acadvizen.store.records import Registration, RegistrationStatus


logger = logging.getLogger(__name__)

_SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
_UPDATED_ROW = re.compile(r"![A-Z]+(\d+)")
EMAIL_COLUMN = 2
STATUS_COLUMN = 5


class SheetWebhookPayload(BaseModel):
    row_id: int | None = None
    email: str
    status: str


@dataclass(frozen=True)
class SyncSummary:
    synced: int
    errors: int


@dataclass(frozen=True)
class WebhookOutcome:
    """Registration matched by a webhook call; webhooks never change it."""

    registration_id: str | None
    registration_status: RegistrationStatus | None


def registration_row(registration: Registration) -> list[str]:
    """Sheet columns: id, name, email, phone, mode, status, source, created_at, notes."""
    created_at = registration.created_at.isoformat() if registration.created_at else ""
    return [
        registration.id,
        registration.name,
        registration.email,
        registration.phone,
        registration.mode.value,
        registration.status.value,
        registration.source,
        created_at,
        registration.notes or "",
    ]


def parse_row_number(updated_range: str) -> int | None:
    """Row number from an append response range such as `Registrations!A12:I12`."""
    match = _UPDATED_ROW.search(updated_range)
    return int(match.group(1)) if match else None


class SheetsSyncService:
    def __init__(
        self,
        store: EntityStore,
        *,
        sheet_id: str = "",
        sheet_range: str = "Registrations!A:I",
        api_key: str = "",
        access_token: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.store = store
        self.sheet_id = sheet_id
        self.sheet_range = sheet_range
        self.api_key = api_key
        self.access_token = access_token
        self._transport = transport

    def _values_url(self, suffix: str = "") -> str:
        return f"{_SHEETS_API_URL}/{self.sheet_id}/values/{quote(self.sheet_range, safe='!:')}{suffix}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=10.0, transport=self._transport)

    def _require(self, *, write: bool) -> None:
        credentials = self.access_token if write else (self.api_key or self.access_token)
        if not self.sheet_id or not credentials:
            msg = "Google Sheets sync is not configured"
            raise DependencyFailure(msg)

    @service_operation("Sync registration to sheet")
    async def sync_registration(self, registration: Registration) -> int | None:
        """Append the registration as a row and record the sync on the registration."""
        self._require(write=True)

        try:
            async with self._client() as client:
                response = await client.post(
                    self._values_url(":append"),
                    params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
                    headers={"Authorization": f"Bearer {self.access_token}"},
                    json={"values": [registration_row(registration)]},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Google Sheets append failed for registration {registration.id}: {e}")
            msg = "Failed to sync with Google Sheets"
            raise DependencyFailure(msg) from e

        row_id = parse_row_number(data.get("updates", {}).get("updatedRange", ""))
        marked = await self.store.update(
            Registration, registration.id, {"google_sheet_synced": True, "google_sheet_row_id": row_id}
        )
        if not marked.success:
            logger.error(f"Failed to update sync status for {registration.id}: {marked.error}")
        return row_id

    @service_operation("Sync pending registrations")
    async def sync_all_pending(self) -> SyncSummary:
        options = ListOptions(filters={"google_sheet_synced": False}, order_by="created_at", ascending=True)
        pending = (await self.store.list(Registration, options)).unwrap()

        synced = errors = 0
        for registration in pending:
            result = await self.sync_registration(registration)
            if result.success:
                synced += 1
            else:
                errors += 1

        logger.info(f"Google Sheets sync finished: {synced} synced, {errors} errors")
        return SyncSummary(synced=synced, errors=errors)

    @service_operation("Fetch confirmed emails from sheet")
    async def get_confirmed_emails(self) -> list[str]:
        """Emails of sheet rows whose status column says confirmed."""
        self._require(write=False)

        params = {}
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        else:
            params["key"] = self.api_key

        try:
            async with self._client() as client:
                response = await client.get(self._values_url(), params=params, headers=headers)
                response.raise_for_status()
                rows = response.json().get("values", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Google Sheets read failed: {e}")
            msg = "Failed to fetch from Google Sheets"
            raise DependencyFailure(msg) from e

        return [
            str(row[EMAIL_COLUMN]).strip().lower()
            for row in rows
            if len(row) > STATUS_COLUMN and str(row[STATUS_COLUMN]).strip().lower() == RegistrationStatus.CONFIRMED
        ]

    @service_operation("Handle sheet webhook")
    async def handle_webhook(self, payload: SheetWebhookPayload) -> WebhookOutcome:
        """Look up the registration behind a sheet row marked confirmed.

        Nothing is mutated: confirmation still goes through the admin workflow.
        """
        if payload.status.strip().lower() != RegistrationStatus.CONFIRMED:
            return WebhookOutcome(registration_id=None, registration_status=None)

        registration = (
            await self.store.find_one(Registration, {"email": payload.email.strip().lower()})
        ).unwrap()
        if registration is None:
            raise ResourceNotFoundError("Registration not found", "Registration", payload.email)

        logger.info(f"Sheet row {payload.row_id} marked {payload.email} confirmed (registration {registration.status})")
        return WebhookOutcome(registration_id=registration.id, registration_status=registration.status)
