"""Service wiring: collaborators are built once at startup and injected, never global."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request

from acadvizen.access.guard import AccessGuard
from acadvizen.admin.service import AdminService
from acadvizen.auth.identity import IdentityProvider
from acadvizen.auth.local import LocalIdentityProvider
from acadvizen.auth.supabase_auth import SupabaseIdentityProvider
from acadvizen.config.settings import Settings
from acadvizen.dashboard.service import DashboardService
from acadvizen.notifications.dispatch import NotificationDispatcher
from acadvizen.notifications.emails import EmailService
from acadvizen.payments.gateway import PaymentGateway, RazorpayGateway
from acadvizen.payments.service import PaymentService
from acadvizen.progress.service import ProgressService
from acadvizen.registrations.service import RegistrationService
from acadvizen.sheets.service import SheetsSyncService
from acadvizen.store.factory import create_store_client, create_supabase_client
from acadvizen.store.gateway import EntityStore
from acadvizen.store.protocols import StoreClient


logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    client: StoreClient
    store: EntityStore
    identity: IdentityProvider
    access: AccessGuard
    registrations: RegistrationService
    payments: PaymentService
    progress: ProgressService
    dashboard: DashboardService
    emails: EmailService
    notifications: NotificationDispatcher
    sheets: SheetsSyncService
    admin: AdminService

    async def close(self) -> None:
        await self.client.close()


def build_services(
    settings: Settings,
    client: StoreClient,
    identity: IdentityProvider | None = None,
    gateway: PaymentGateway | None = None,
) -> Services:
    """Assemble the workflows around an already constructed store client."""
    store = EntityStore(client)
    if identity is None:
        identity = LocalIdentityProvider(
            store,
            settings.AUTH_SECRET_KEY.get_secret_value(),
            timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
    if gateway is None:
        gateway = RazorpayGateway(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET.get_secret_value())

    access = AccessGuard(store)
    emails = EmailService(
        store,
        api_key=settings.RESEND_API_KEY.get_secret_value(),
        from_email=settings.EMAILS_FROM_EMAIL,
        from_name=settings.EMAILS_FROM_NAME,
    )
    return Services(
        settings=settings,
        client=client,
        store=store,
        identity=identity,
        access=access,
        registrations=RegistrationService(store, identity),
        payments=PaymentService(store, gateway, settings.DEFAULT_CURRENCY),
        progress=ProgressService(store, access),
        dashboard=DashboardService(store, access),
        emails=emails,
        notifications=NotificationDispatcher(store, emails, settings.login_url),
        sheets=SheetsSyncService(
            store,
            sheet_id=settings.GOOGLE_SHEET_ID,
            sheet_range=settings.GOOGLE_SHEET_RANGE,
            api_key=settings.GOOGLE_SHEETS_API_KEY,
            access_token=settings.GOOGLE_SHEETS_ACCESS_TOKEN.get_secret_value(),
        ),
        admin=AdminService(store),
    )


async def create_services(settings: Settings) -> Services:
    """Build the configured store and identity providers, then the workflows."""
    uses_supabase = settings.STORE_PROVIDER == "supabase" or settings.AUTH_PROVIDER == "supabase"
    supabase = await create_supabase_client(settings) if uses_supabase else None

    client = await create_store_client(settings, supabase)
    identity: IdentityProvider | None = None
    if settings.AUTH_PROVIDER == "supabase":
        identity = SupabaseIdentityProvider(supabase)
    elif settings.AUTH_PROVIDER != "local":
        msg = f"Unknown AUTH_PROVIDER: {settings.AUTH_PROVIDER}"
        raise ValueError(msg)

    logger.info(f"Services ready (store={settings.STORE_PROVIDER}, auth={settings.AUTH_PROVIDER})")
    return build_services(settings, client, identity)


def get_services(request: Request) -> Services:
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]
