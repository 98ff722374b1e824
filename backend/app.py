"""FastAPI application entry point for the tracking enrichment API."""

import logging
import sys

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings
from errors import register_error_handlers
from services.cache import TTLCache
from services.enrichment_service import EnrichmentService
from services.fetcher import ReferenceFetcher
from services.schemas import get_schema

logger = logging.getLogger(__name__)


def configure_logging(config: Settings) -> None:
    """Structured logging: JSON for production, human-readable for local."""
    if config.is_production:
        logging.basicConfig(
            level=logging.INFO,
            format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
            stream=sys.stdout,
        )
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def create_app(config: Settings = settings, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    configure_logging(config)
    schema = get_schema(config.technology)
    app = FastAPI(title=f"Tracking Enrichment API ({schema.name.upper()})", version="1.0.0")
    app.state.config = config

    app.state.service = EnrichmentService(
        schema=schema,
        fetcher=ReferenceFetcher(config.api_base_url, config.fetch_timeout_seconds, transport=transport),
        cache=TTLCache(ttl_seconds=config.cache_ttl_seconds),
        tz=config.timezone,
        latest_limit=config.latest_limit,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
        allow_credentials=True,
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if config.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.events import build_router
    from routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(build_router(schema.route_prefix))

    @app.on_event("startup")
    async def _validate_config() -> None:
        problems = config.validate()
        if problems:
            logger.warning("Configuration problems: %s", "; ".join(problems))
        logger.info(
            "Serving %s events from %s (cache TTL %ss)",
            schema.name,
            config.api_base_url,
            config.cache_ttl_seconds,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
