"""Main entrypoint and application factory for the Firefly AI Categorizer API.

This module builds the FastAPI application, configures logging, wires the classification pipeline, registers the
Firefly III webhook, starts the tag poller, and exposes the Scalar API reference endpoint for interactive OpenAPI
documentation. It also includes the main entrypoint for running the app with Uvicorn.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from scalar_fastapi import get_scalar_api_reference

from categorizer.api.dependencies import Services, build_services
from categorizer.api.routes import router
from categorizer.core.exceptions import LedgerError
from categorizer.core.settings import Settings, get_settings
from categorizer.core.utils import get_logger, setup_logging

logger = get_logger("firefly-categorizer")


def setup_webhook(services: Services) -> None:
    """Register the Firefly III webhook when WEBHOOK_URL is set; never blocks startup."""
    webhook_url = services.settings.webhook_url
    if not webhook_url:
        logger.warning("WEBHOOK_URL is not configured, the Firefly III webhook must be set up manually")
        return
    try:
        services.ledger.ensure_webhook(webhook_url)
    except LedgerError:
        logger.exception("Webhook setup failed, manual configuration required")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the services on startup, then drain the queue and stop the poller on shutdown."""
    services: Services | None = getattr(app.state, "services", None)
    if services is None:
        services = build_services(app.state.settings)
        app.state.services = services
    logger.info(f"Using provider '{services.settings.provider}', language {services.settings.language}")
    setup_webhook(services)
    services.poller.start()
    yield
    services.poller.stop()
    services.queue.shutdown(wait=True)


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Create the FastAPI application; ``services`` replaces the components built from settings."""
    settings = services.settings if services else settings or get_settings()
    setup_logging(settings.debug, settings.log_file)
    app = FastAPI(
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        title="Firefly AI Categorizer API",
        description="""
    The Firefly AI Categorizer classifies Firefly III transactions with a language model and writes the category,
    destination account and a marker tag back to the ledger.

    **Endpoints:**
    - `POST /webhook`: Firefly III STORE_TRANSACTION webhook. Returns a `job_id`.
    - `POST /tag-poll`: Reprocess the transactions carrying the configured tag filter.
    - `GET /jobs`: List classification jobs.
    - `GET /jobs/{{job_id}}`: Check a classification job.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
        version="1.0.0",
    )
    app.state.settings = settings
    if services is not None:
        app.state.services = services
    app.include_router(router)

    @app.get("/scalar", include_in_schema=False)
    async def scalar_docs() -> HTMLResponse:
        """Return Scalar API reference."""
        return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.server_host, port=settings.server_port)
