"""Enriched event routes, mounted under the active technology's prefix.

GET {prefix}            → filter by ?date= or ?start=/&end=, then enrich
GET {prefix}/today      → today's local calendar day
GET {prefix}/yesterday  → yesterday's local calendar day
GET {prefix}/weekly     → local midnight 7 days ago until now
GET {prefix}/latest     → most recent events, newest first
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from services import time_window
from services.enrichment_service import EnrichmentService

logger = logging.getLogger(__name__)


def get_service(request: Request) -> EnrichmentService:
    return request.app.state.service


def build_router(prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=["events"])

    @router.get("")
    async def enriched_events(
        date: str | None = Query(None, description="Local calendar day, YYYY-MM-DD"),
        start: str | None = Query(None, description="Inclusive ISO instant; defaults to the epoch"),
        end: str | None = Query(None, description="Inclusive ISO instant; defaults to now"),
        service: EnrichmentService = Depends(get_service),
    ) -> list[dict]:
        """Events for one day or a range. ``date`` takes precedence over ``start``/``end``."""
        # Parse before touching the cache so bad input never costs an upstream call.
        window = time_window.from_query(date, start, end, service.tz)
        return await service.get_events(window)

    @router.get("/today")
    async def today(service: EnrichmentService = Depends(get_service)) -> list[dict]:
        return await service.get_events(time_window.today(service.tz))

    @router.get("/yesterday")
    async def yesterday(service: EnrichmentService = Depends(get_service)) -> list[dict]:
        return await service.get_events(time_window.yesterday(service.tz))

    @router.get("/weekly")
    async def weekly(service: EnrichmentService = Depends(get_service)) -> list[dict]:
        return await service.get_events(time_window.weekly(service.tz))

    @router.get("/latest")
    async def latest(service: EnrichmentService = Depends(get_service)) -> list[dict]:
        """Most recent events sorted newest first; ties keep upstream order."""
        return await service.get_events(service.latest_window())

    return router
