"""Oneclick API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Inscription/transaction routes mounted under the path of BASE_URL
    - Store, gateway client and codec built once on startup and injected into the
      orchestrators; closed on shutdown
    - Startup fails when a redirect URL setting is missing

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Global error handlers extracted to api/error_handlers.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oneclick.api.dependencies import attach_orchestrators
from oneclick.api.error_handlers import register_error_handlers
from oneclick.api.routes import health, inscriptions, transactions
from oneclick.config import get_settings
from oneclick.core.identifier_codec import IdentifierCodec
from oneclick.infrastructure.database import DatabaseSessionManager
from oneclick.infrastructure.document_store import SqlDocumentStore
from oneclick.infrastructure.observability import setup_logging
from oneclick.infrastructure.oneclick_client import OneclickMallClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    settings.check_redirect_settings()

    db_manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    gateway = OneclickMallClient.from_settings(settings)
    codec = IdentifierCodec(
        settings.encryption_key, settings.inscription_callback_ttl_seconds,
    )
    if not settings.encryption_key:
        logger.warning("ENCRYPTION_KEY not set, callback links die with this process")

    app.state.db_manager = db_manager
    attach_orchestrators(app, settings, SqlDocumentStore(db_manager), gateway, codec)
    logger.info(
        f"Oneclick API started, base-path={settings.base_path} "
        f"gateway-mode={settings.gateway_mode.value}",
    )
    yield
    logger.info("Oneclick API shutting down")
    await gateway.close()
    await db_manager.close()


app = FastAPI(title="Oneclick API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["OPTIONS", "HEAD", "GET", "POST"],
    allow_headers=[
        "Content-Type", "Origin", "Referer", "X-Requested-With", "Authorization",
    ],
)

# Routes (explicit registration)
_base_prefix = settings.base_path.rstrip("/")
app.include_router(health.router)
if _base_prefix:
    app.include_router(health.router, prefix=_base_prefix)
app.include_router(inscriptions.router, prefix=_base_prefix)
app.include_router(transactions.router, prefix=_base_prefix)

register_error_handlers(app)
