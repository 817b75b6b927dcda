"""binday - recurring pickup scheduling with metered billing."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import constants, settings
from src.core.db_client import close_connection, init_db
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.api_router import register_error_handlers, router as api_router
from src.interface.stripe_gateway import StripeBillingGateway


logger = logging.getLogger(__name__)


def validate_startup_configuration() -> None:
    """Validate required credentials, exiting with a clear message if any is missing."""
    logger.info("startup_validation_begin")

    try:
        settings.require_credential("stripe_secret_key", "Stripe")
        logger.info("startup_validation", extra={"stage": "credentials", "status": "ok"})
    except ValueError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so validation logs are captured
    configure_logfire()

    validate_startup_configuration()

    await init_db()
    logger.info("Database initialized")

    app.state.billing_gateway = StripeBillingGateway()
    yield
    # Shutdown
    await close_connection()


app = FastAPI(
    title="binday",
    description="Recurring pickup scheduling with metered billing",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(api_router)
register_error_handlers(app)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=constants.HTTP_OK)
