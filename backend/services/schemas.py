"""Schema descriptors for the two tracking technologies.

Both run the same pipeline (fetch, filter, join, format); only the
upstream paths, key selectors, code tables and output fields differ.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from services import lookup
from services.enrichment import Constant, Copy, Join, Timestamp, Translate

EVENT_TYPE_LABELS = {
    "insert": "Inserimento",
    "movement": "Spostamento",
    "missed": "Rimozione",
}

DIRECTION_LABELS = {
    "enter": "In",
    "exit": "Out",
}

UNKNOWN_OPERATOR = "UnknownOperator"


@dataclass(frozen=True)
class Source:
    """One upstream collection: cache key, path under the API base URL, and index key."""

    key: str
    path: str
    key_selector: lookup.KeySelector | None = None


@dataclass(frozen=True)
class TechnologySchema:
    name: str
    route_prefix: str
    events: Source
    references: Sequence[Source]
    fields: Sequence[Any]
    timestamp_field: str = "ts"

    @property
    def sources(self) -> list[Source]:
        return [self.events, *self.references]


RFID = TechnologySchema(
    name="rfid",
    route_prefix="/api/enriched_events",
    events=Source("events", "event_rfid/"),
    references=(
        Source("racks", "rack/", lookup.field("uuid")),
        Source("operators", "operator/", lookup.field("uuid")),
        Source("warehouses", "warehouse/", lookup.field("uuid")),
        Source("tags", "tag_rfid/", lookup.field("id")),
    ),
    fields=(
        Copy("tag_rfid", "tag_rfid"),
        Join("categoria", "tags", lookup.field("tag_rfid"), attribute="product_category"),
        Translate("tipo", "type", EVENT_TYPE_LABELS),
        Join("operatore", "operators", lookup.field("operator"), attribute="identity"),
        Join("rack", "racks", lookup.field("rack")),
        # Events only carry the rack; the warehouse hangs off the rack record.
        Join("magazzino", "warehouses", lookup.field("warehouse"), via="rack"),
        Timestamp("data"),
    ),
)

_ble_warehouse = lookup.field("warehouse", default="unknownWarehouse")
_ble_area = lookup.field("area", default="unknownArea")

BLE = TechnologySchema(
    name="ble",
    route_prefix="/api/enriched_area_events",
    events=Source("events", "area_event_ble"),
    references=(
        # Not joined yet: area events carry a MAC but no operator link.
        Source("operators", "operator", lookup.field("identity")),
        Source("warehouses", "warehouse", lookup.field("uuid")),
        # Area ids are only unique within their warehouse.
        Source(
            "warehouse_area_type",
            "warehouse_area_type",
            lookup.compound(lookup.field("warehouse_uuid"), lookup.field("id")),
        ),
    ),
    fields=(
        Copy("MAC", "MAC", default="N/A"),
        Constant("Operator", UNKNOWN_OPERATOR),
        Join("Warehouse", "warehouses", _ble_warehouse, fallback_to_key=True),
        Join("Zone", "warehouse_area_type", lookup.compound(_ble_warehouse, _ble_area), fallback_to_key=True),
        Translate("Direction", "direction", DIRECTION_LABELS, default="unknownDirection"),
        Timestamp("Date"),
    ),
)

SCHEMAS = {schema.name: schema for schema in (RFID, BLE)}


def get_schema(technology: str) -> TechnologySchema:
    schema = SCHEMAS.get(technology.lower())
    if not schema:
        raise ValueError(f"Unsupported technology: {technology}. Supported: {sorted(SCHEMAS)}")
    return schema
