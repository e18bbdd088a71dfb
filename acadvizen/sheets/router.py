"""Inbound webhook from the registrations sheet."""

import hmac

from fastapi import APIRouter, Header

from acadvizen.auth.exceptions import AuthenticationError
from acadvizen.container import ServicesDep
from acadvizen.sheets.service import SheetWebhookPayload, WebhookOutcome


router = APIRouter(prefix="/api/v1/sheets", tags=["sheets"])


@router.post("/webhook")
async def sheet_webhook(
    payload: SheetWebhookPayload,
    services: ServicesDep,
    x_webhook_secret: str = Header(default=""),
) -> WebhookOutcome:
    """Called by the sheet's script when a row status changes. Read-only."""
    expected = services.settings.SHEETS_WEBHOOK_SECRET.get_secret_value()
    if not expected or not hmac.compare_digest(expected, x_webhook_secret):
        msg = "Invalid webhook secret"
        raise AuthenticationError(msg)
    return (await services.sheets.handle_webhook(payload)).unwrap()
