"""Identifier-keyed lookup maps built from reference collections.

Maps are rebuilt on every request from whatever the cache holds, so they
always reflect the current cache state. Building never mutates the
collection: the map holds references to the cached records and nothing
writes through them.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

KeySelector = Callable[[Mapping[str, Any]], Any]

COMPOUND_SEPARATOR = "_"


def key_part(value: Any) -> str:
    """Render one component of a compound key.

    Whole floats render without a decimal point so that ``2`` and ``2.0``
    from different collections produce the same key.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def field(name: str, default: Any = None) -> KeySelector:
    """Select a single field as a string key, substituting ``default`` when it is missing or empty.

    Keys are normalized to strings so that a numeric id in one collection
    matches the same id sent as a string in another.
    """

    def select(record: Mapping[str, Any]) -> Any:
        value = record.get(name)
        if value is None or value == "":
            return default
        return key_part(value)

    select.__name__ = f"field_{name}"
    return select


def compound(*selectors: KeySelector, separator: str = COMPOUND_SEPARATOR) -> KeySelector:
    """Join several selected values into one string key, e.g. ``"<warehouse>_<area>"``."""

    def select(record: Mapping[str, Any]) -> str:
        return separator.join(key_part(s(record)) for s in selectors)

    return select


def build(collection: Iterable[Mapping[str, Any]], key_selector: KeySelector) -> dict[Any, Mapping[str, Any]]:
    """Index ``collection`` by ``key_selector``; duplicate keys keep the last record."""
    lookup = {}
    for record in collection:
        if not isinstance(record, Mapping):
            continue
        key = key_selector(record)
        if key is None:
            continue
        lookup[key] = record
    return lookup
