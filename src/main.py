"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager
from typing import Any

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from src.api import health, webhook
from src.config import Settings, get_settings
from src.constants import APP_TITLE, APP_VERSION, WEBHOOK_PATH
from src.db.client import get_supabase_client
from src.logging_config import setup_logfire
from src.services.admission_pipeline import AdmissionPipeline
from src.services.conversation_engine import (
    ConversationEngine,
    load_conversation_engine,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Fills in whatever ``create_app`` was not given: settings from the
    environment, the Supabase handle and the configured conversation engine.
    """
    settings = app.state.settings or get_settings()
    app.state.settings = settings

    # Initialize Logfire for observability
    setup_logfire(app, settings)

    # Initialize Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            integrations=[FastApiIntegration()],
        )

    if app.state.database is None:
        app.state.database = get_supabase_client(settings)

    if app.state.conversation_engine is None:
        app.state.conversation_engine = load_conversation_engine(
            settings.conversation_engine
        )

    app.state.admission_pipeline = AdmissionPipeline.from_settings(
        settings,
        app.state.conversation_engine,
        app.state.database,
    )

    logfire.info(
        "Application startup complete",
        environment=settings.env,
        stale_message_minutes=settings.stale_message_minutes,
    )

    yield

    logfire.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    conversation_engine: ConversationEngine | None = None,
    database: Any = None,
) -> FastAPI:
    """Build the webhook application.

    When both ``settings`` and ``conversation_engine`` are supplied the
    admission pipeline is assembled immediately, so the app serves requests
    without running its lifespan (useful in tests).

    Args:
        settings: Configuration; loaded from the environment at startup if omitted
        conversation_engine: Engine receiving admitted messages; loaded from
                             ``settings.conversation_engine`` if omitted
        database: Opaque database handle; a Supabase client if omitted
    """
    app = FastAPI(
        title=APP_TITLE,
        description="Inbound WhatsApp webhook: signature checks and message admission",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.conversation_engine = conversation_engine
    app.state.database = database
    if settings is not None and conversation_engine is not None:
        app.state.admission_pipeline = AdmissionPipeline.from_settings(
            settings, conversation_engine, database
        )

    # Register routers
    app.include_router(health.router, tags=["health"])
    app.include_router(webhook.router, prefix=WEBHOOK_PATH, tags=["webhook"])

    @app.get("/")
    def root():
        """Root endpoint."""
        return {
            "message": APP_TITLE,
            "version": APP_VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )
