import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv


# Load .env FIRST before any other imports that might need env vars
PROJECT_DIR = Path(__file__).parent.parent
load_dotenv(PROJECT_DIR / ".env")

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from acadvizen.admin.router import router as admin_router
from acadvizen.auth.router import router as auth_router
from acadvizen.config import env
from acadvizen.config.logging import setup_logging
from acadvizen.config.settings import get_settings
from acadvizen.container import create_services
from acadvizen.dashboard.router import router as dashboard_router
from acadvizen.exceptions import DomainError
from acadvizen.middleware.error_handlers import (
    handle_domain_errors,
    handle_http_errors,
    handle_request_validation_errors,
    handle_unexpected_errors,
)
from acadvizen.middleware.security import SimpleSecurityMiddleware, limiter
from acadvizen.payments.router import router as payments_router
from acadvizen.progress.router import router as progress_router
from acadvizen.registrations.router import router as registrations_router
from acadvizen.sheets.router import router as sheets_router


setup_logging(env("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)


def _register_routers(app: FastAPI) -> None:
    """Register all application routers."""
    app.include_router(auth_router)
    app.include_router(registrations_router)
    app.include_router(payments_router)
    app.include_router(progress_router)
    app.include_router(dashboard_router)
    app.include_router(admin_router)
    app.include_router(sheets_router)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build services on startup (unless already injected) and release them on shutdown."""
    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        app.state.services = await create_services(get_settings())

    yield

    if owns_services:
        logger.info("Starting graceful shutdown...")
        await app.state.services.close()
        logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    try:
        settings = get_settings()
    except Exception:
        logger.exception("Failed to load settings")
        raise

    app = FastAPI(
        title=settings.APP_NAME,
        description="Registration, enrollment and payment API for AcadVizen Digital Hub",
        version="0.1.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SimpleSecurityMiddleware)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(DomainError, handle_domain_errors)
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_errors)
    app.add_exception_handler(Exception, handle_unexpected_errors)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Check application health status."""
        return {"status": "healthy"}

    _register_routers(app)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    host = env("API_HOST", "127.0.0.1")
    port = int(env("API_PORT", "8080"))

    uvicorn.run(app, host=host, port=port)
