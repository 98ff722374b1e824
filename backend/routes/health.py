"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Depends, Request

from config import Settings
from routes.events import get_service
from services.enrichment_service import EnrichmentService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_config(request: Request) -> Settings:
    return request.app.state.config


@router.get("/ready")
async def ready(
    service: EnrichmentService = Depends(get_service),
    config: Settings = Depends(get_config),
) -> dict:
    """Lightweight readiness check — no external calls."""
    return {
        "status": "ok",
        "service": "tracking-enrichment",
        "technology": service.schema.name,
        "commit": config.git_sha,
    }


@router.get("/health")
async def health(
    service: EnrichmentService = Depends(get_service),
    config: Settings = Depends(get_config),
) -> dict:
    """Cache state per collection. Never calls upstream, so it can't be slowed by it."""
    entries = service.cache_status()
    collections = {
        source.key: {
            "cached": source.key in entries,
            "expires_in_seconds": entries.get(source.key),
        }
        for source in service.schema.sources
    }
    return {
        "status": "ok",
        "service": "tracking-enrichment",
        "technology": service.schema.name,
        "commit": config.git_sha,
        "upstream": service.fetcher.base_url,
        "cache_ttl_seconds": service.cache.ttl_seconds,
        "collections": collections,
    }
