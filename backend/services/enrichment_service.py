"""Request-scoped pipeline: cached fetch -> time window -> lookups -> enrichment."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from services import lookup, time_window
from services.cache import TTLCache
from services.enrichment import enrich
from services.fetcher import ReferenceFetcher
from services.schemas import Source, TechnologySchema
from services.time_window import TimeWindow

logger = logging.getLogger(__name__)


class EnrichmentService:
    """Owns the collection cache for one technology and serves enriched events."""

    def __init__(
        self,
        schema: TechnologySchema,
        fetcher: ReferenceFetcher,
        cache: TTLCache[str, list[dict]],
        tz: str,
        latest_limit: int = time_window.DEFAULT_LATEST_LIMIT,
    ):
        self.schema = schema
        self.fetcher = fetcher
        self.cache = cache
        self.tz = tz
        self.latest_limit = latest_limit

    async def _collection(self, source: Source) -> list[dict]:
        return await self.cache.get_or_fetch(source.key, lambda: self.fetcher.fetch(source.path))

    async def snapshot(self) -> dict[str, list[dict]]:
        """Pin one payload per collection for the rest of the request.

        Collections load concurrently; if any of them fails the whole
        request fails, there is no partially enriched output.
        """
        sources = self.schema.sources
        payloads = await asyncio.gather(*(self._collection(source) for source in sources))
        return {source.key: payload for source, payload in zip(sources, payloads)}

    def build_lookups(self, snapshot: Mapping[str, list[dict]]) -> dict[str, dict[Any, Mapping[str, Any]]]:
        return {
            source.key: lookup.build(snapshot[source.key], source.key_selector)
            for source in self.schema.references
            if source.key_selector is not None
        }

    async def get_events(self, window: TimeWindow) -> list[dict]:
        snapshot = await self.snapshot()
        raw_events = [ev for ev in snapshot[self.schema.events.key] if isinstance(ev, Mapping)]
        selected = time_window.apply(window, raw_events, self.tz, self.schema.timestamp_field)
        enriched = enrich(selected, self.schema.fields, self.build_lookups(snapshot), self.tz)
        logger.info(
            "%s %s window: %d of %d events enriched",
            self.schema.name,
            window.mode,
            len(enriched),
            len(raw_events),
        )
        return enriched

    def latest_window(self) -> TimeWindow:
        return time_window.latest(self.latest_limit)

    def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self.cache.clear()
        else:
            self.cache.invalidate(key)

    def cache_status(self) -> dict[str, float]:
        return self.cache.entries()
