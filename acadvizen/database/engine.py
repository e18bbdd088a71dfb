from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


def create_app_engine(database_url: str) -> AsyncEngine:
    """Create the async engine optimized for direct Postgres or Supabase pooler.

    - Direct (docker-compose:5432): standard pool with pre-ping.
    - Supabase pooler (pooler.supabase.*:6543): small pool so we don't hog sessions.

    Transaction poolers do not support prepared statements, so they are
    disabled for pooler URLs (psycopg3 `prepare_threshold=None`).
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=False)

    # Heuristic: any Supabase pooler URL contains either ".supabase." or ".pooler."
    using_pooler = ".supabase." in database_url or ".pooler." in database_url

    if using_pooler:
        # Session pooler: keep pool small (each connection holds a backend)
        pool_size = 3
        max_overflow = 2
        pool_recycle = 1800
        connect_args = {"connect_timeout": 10, "prepare_threshold": None}
    else:
        pool_size = 10
        max_overflow = 10
        pool_recycle = 3600
        connect_args = {"connect_timeout": 10}

    return create_async_engine(
        database_url,
        echo=False,  # Set True for SQL debugging
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        pool_use_lifo=True,  # Reuse hot connections (beneficial with poolers)
        connect_args=connect_args,
    )
