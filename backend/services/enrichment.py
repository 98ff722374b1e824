"""Enrichment engine: turn raw events into display-ready records.

Each output field is described by one of the field kinds below; a
technology schema is just an ordered list of them. A join that misses
degrades to a fallback value, so one bad reference never fails a batch.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from services.lookup import KeySelector
from services.time_window import parse_instant

SENTINEL = "Sconosciuto"
DISPLAY_FORMAT = "%d/%m/%Y %H:%M:%S"

Lookups = Mapping[str, Mapping[Any, Mapping[str, Any]]]


def _blank(value: Any) -> bool:
    return value is None or value == ""


def translate(code: Any, table: Mapping[str, str]) -> Any:
    """Map a coded value to its label; unknown codes pass through unchanged."""
    if isinstance(code, str) and code in table:
        return table[code]
    return code


def format_timestamp(value: Any, tz: str) -> Any:
    """Render a wire timestamp as ``DD/MM/YYYY HH:mm:ss`` local time.

    Values that don't parse are returned untouched.
    """
    instant = parse_instant(value, tz)
    if instant is None:
        return value
    return instant.tz_convert(tz).strftime(DISPLAY_FORMAT)


class _Context:
    """Per-event scratch space: joined records by output name."""

    def __init__(self, lookups: Lookups, tz: str):
        self.lookups = lookups
        self.tz = tz
        self.records: dict[str, Mapping[str, Any] | None] = {}


@dataclass(frozen=True)
class Copy:
    output: str
    source: str
    default: Any = None

    def resolve(self, event: Mapping[str, Any], ctx: _Context) -> Any:
        value = event.get(self.source)
        return self.default if _blank(value) else value


@dataclass(frozen=True)
class Constant:
    output: str
    value: Any

    def resolve(self, event: Mapping[str, Any], ctx: _Context) -> Any:
        return self.value


@dataclass(frozen=True)
class Translate:
    output: str
    source: str
    table: Mapping[str, str]
    default: Any = None

    def resolve(self, event: Mapping[str, Any], ctx: _Context) -> Any:
        code = event.get(self.source)
        return translate(self.default if _blank(code) else code, self.table)


@dataclass(frozen=True)
class Timestamp:
    output: str
    source: str = "ts"

    def resolve(self, event: Mapping[str, Any], ctx: _Context) -> Any:
        return format_timestamp(event.get(self.source), ctx.tz)


@dataclass(frozen=True)
class Join:
    """Resolve a foreign key through a lookup and show one attribute of the match.

    ``key`` selects the join key from the event, or from the record resolved
    by an earlier join when ``via`` names one (e.g. rack -> warehouse).
    On a miss the field shows ``fallback``, or the join key itself when
    ``fallback_to_key`` is set.
    """

    output: str
    lookup: str
    key: KeySelector
    attribute: str = "name"
    fallback: Any = SENTINEL
    fallback_to_key: bool = False
    via: str | None = None

    def resolve(self, event: Mapping[str, Any], ctx: _Context) -> Any:
        source = event if self.via is None else ctx.records.get(self.via)
        key = self.key(source) if source is not None else None
        record = ctx.lookups.get(self.lookup, {}).get(key) if key is not None else None
        ctx.records[self.output] = record

        value = record.get(self.attribute) if record is not None else None
        if not _blank(value):
            return value
        if self.fallback_to_key and key is not None:
            return key
        return self.fallback


def enrich_event(event: Mapping[str, Any], fields: Sequence[Any], lookups: Lookups, tz: str) -> dict[str, Any]:
    ctx = _Context(lookups, tz)
    return {f.output: f.resolve(event, ctx) for f in fields}


def enrich(events: Sequence[Mapping[str, Any]], fields: Sequence[Any], lookups: Lookups, tz: str) -> list[dict]:
    """One enriched record per event, in input order."""
    return [enrich_event(ev, fields, lookups, tz) for ev in events]
