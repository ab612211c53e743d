"""
OpenFX — FastAPI application entry point.

Configures the app, middleware, error rendering, and registers the API
routers. The lifespan starts the ledger sweep timer.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from openfx import __version__
from openfx.api import currencies, quotes, transactions
from openfx.api.deps import ledger, quote_book
from openfx.api.errors import (
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from openfx.config import settings
from openfx.core.timer import IntervalTimer
from openfx.logging_conf import setup_logging

logger = logging.getLogger(__name__)


def _sweep() -> None:
    """Materialize transaction statuses and drop expired quotes."""
    ledger.advance()
    quote_book.purge_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)

    sweeper = None
    if settings.LEDGER_SWEEP_INTERVAL_SECONDS > 0:
        sweeper = IntervalTimer(
            settings.LEDGER_SWEEP_INTERVAL_SECONDS, _sweep, name="ledger-sweeper",
        ).start()
    logger.info("%s %s started (env=%s)", settings.APP_NAME, __version__, settings.APP_ENV)

    yield

    if sweeper is not None:
        await sweeper.stop()


app = FastAPI(
    title=settings.APP_NAME,
    description="Simulated FX transfer flow: quote, pay, and track a transaction.",
    version=__version__,
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Error rendering ---
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(quotes.router, prefix="/api", tags=["Quotes"])
app.include_router(transactions.router, prefix="/api", tags=["Transactions"])
app.include_router(currencies.router, prefix="/api", tags=["Currencies"])


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": __version__,
    }
