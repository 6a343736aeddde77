"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import httpx
import logfire
import sentry_sdk
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sentry_sdk.integrations.fastapi import FastApiIntegration

from line_echo_bot.api import health, webhook
from line_echo_bot.config import get_settings
from line_echo_bot.constants import (
    DEFAULT_PORT,
    DOWNLOAD_DIR,
    DOWNLOADED_URL_PREFIX,
    STATIC_DIR,
    STATIC_URL_PREFIX,
    WEBHOOK_PATH,
)
from line_echo_bot.logging_config import setup_logfire
from line_echo_bot.middleware.correlation_id import CorrelationIDMiddleware
from line_echo_bot.services.event_dispatcher import EventDispatcher
from line_echo_bot.services.line_api import LineApiClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: observability, platform client and dispatcher."""
    settings = get_settings()

    # Initialize Logfire for observability
    setup_logfire(app)

    # Initialize Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            environment=settings.env,
            integrations=[FastApiIntegration()],
        )

    DOWNLOAD_DIR.mkdir(parents=True, exist_ok=True)

    http_client = httpx.AsyncClient()
    try:
        platform = LineApiClient(
            http_client,
            channel_access_token=settings.line_channel_access_token,
            reply_timeout_seconds=settings.line_api_timeout_seconds,
        )
        app.state.line_platform = platform
        app.state.event_dispatcher = EventDispatcher(
            platform, base_url=settings.base_url, download_dir=DOWNLOAD_DIR
        )

        logfire.info(
            "Application startup complete",
            environment=settings.env,
            base_url=settings.base_url,
            signature_check=bool(settings.line_channel_secret),
        )

        yield
    finally:
        await http_client.aclose()
        logfire.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="LINE Echo Bot",
    description="LINE Messaging API webhook that echoes messages and media back",
    version="0.1.0",
    lifespan=lifespan,
)

# Correlation ID middleware (must be first for request tracing)
app.add_middleware(CorrelationIDMiddleware)

# Register routers
app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix=WEBHOOK_PATH, tags=["webhook"])

# Serve static assets and downloaded media
app.mount(
    STATIC_URL_PREFIX,
    StaticFiles(directory=STATIC_DIR, check_dir=False),
    name="static",
)
app.mount(
    DOWNLOADED_URL_PREFIX,
    StaticFiles(directory=DOWNLOAD_DIR, check_dir=False),
    name="downloaded",
)


@app.get("/", response_class=PlainTextResponse)
def root():
    """Root endpoint."""
    logfire.info("Root accessed")
    return "Hello World!"


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", DEFAULT_PORT))
    uvicorn.run(
        "line_echo_bot.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("ENV") == "local",
    )
