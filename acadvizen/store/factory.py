"""Store provider factory for creating the configured store client."""

import logging

from supabase import AsyncClient, acreate_client

from acadvizen.config.settings import Settings
from acadvizen.database.base import create_all_tables
from acadvizen.database.engine import create_app_engine
from acadvizen.store.protocols import StoreClient
from acadvizen.store.sql_client import SqlStoreClient
from acadvizen.store.supabase_client import SupabaseStoreClient


logger = logging.getLogger(__name__)


async def create_supabase_client(settings: Settings) -> AsyncClient:
    """Service-role Supabase client shared by the store and identity providers."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_SECRET_KEY:
        msg = "Supabase configuration missing (SUPABASE_URL / SUPABASE_SECRET_KEY)"
        raise ValueError(msg)
    return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_SECRET_KEY)


async def create_store_client(settings: Settings, supabase: AsyncClient | None = None) -> StoreClient:
    """Get the configured store client instance.

    Returns
    -------
        `SqlStoreClient` for STORE_PROVIDER=postgres (tables are created on
        first start), otherwise a `SupabaseStoreClient`.
    """
    if settings.STORE_PROVIDER == "postgres":
        engine = create_app_engine(settings.DATABASE_URL)
        await create_all_tables(engine)
        logger.info("Using SQL store backend")
        return SqlStoreClient(engine)

    if settings.STORE_PROVIDER != "supabase":
        msg = f"Unknown STORE_PROVIDER: {settings.STORE_PROVIDER}"
        raise ValueError(msg)

    logger.info("Using Supabase store backend")
    return SupabaseStoreClient(supabase or await create_supabase_client(settings))
