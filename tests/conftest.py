"""
Pytest fixtures shared by the unit and route tests.

The upstream tracking API is replaced by an in-process httpx.MockTransport
that serves canned collections and counts calls per path.
"""
import copy
from collections import Counter

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings

BASE_URL = "http://tracking.test/api/v0"
TZ = "Europe/Rome"


RFID_COLLECTIONS = {
    "rack/": [
        {"uuid": "r1", "name": "Checkout", "warehouse": "w1"},
        {"uuid": "r2", "name": "FittingRoom", "warehouse": "w-gone"},
    ],
    "operator/": [
        {"uuid": "o1", "identity": "Mario Rossi"},
    ],
    "warehouse/": [
        {"uuid": "w1", "name": "Milano Centro"},
    ],
    "tag_rfid/": [
        {"id": 101, "product_category": "Scarpe"},
        {"id": "102", "product_category": "Giacche"},
    ],
    "event_rfid/": [
        {"tag_rfid": "101", "type": "insert", "operator": "o1", "rack": "r1", "ts": "2025-03-10T09:15:00Z"},
        {"tag_rfid": 102, "type": "movement", "operator": "o-new", "rack": "r2", "ts": "2025-03-10T22:59:59.999Z"},
        {"tag_rfid": "999", "type": "missed", "operator": "o1", "rack": "r-gone", "ts": "2025-03-11T08:00:00Z"},
        {"tag_rfid": "101", "type": "recount", "operator": "o1", "rack": "r1", "ts": "2025-03-09T12:00:00Z"},
    ],
}

BLE_COLLECTIONS = {
    "operator": [{"identity": "Anna Bianchi"}],
    "warehouse": [{"uuid": "99849379288172366", "name": "Point Demo"}],
    "warehouse_area_type": [
        {"id": 2, "warehouse_uuid": "99849379288172366", "name": "AreaRTLS"},
    ],
    "area_event_ble": [
        {"MAC": "AA:BB:CC:00:00:01", "warehouse": "99849379288172366", "area": 2,
         "direction": "enter", "ts": "2025-03-10T09:15:00Z"},
        {"MAC": "AA:BB:CC:00:00:02", "warehouse": "99849379288172366", "area": 7,
         "direction": "exit", "ts": "2025-03-10T10:00:00Z"},
    ],
}


class FakeUpstream:
    """Serves collections by path; paths in ``failing`` answer 503."""

    def __init__(self, collections: dict):
        self.collections = copy.deepcopy(collections)
        self.calls: Counter = Counter()
        self.failing: set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.split("/api/v0/", 1)[-1]
        self.calls[path] += 1
        if path in self.failing:
            return httpx.Response(503, json={"detail": "maintenance"})
        if path not in self.collections:
            return httpx.Response(404, json={"detail": "not found"})
        return httpx.Response(200, json=self.collections[path])

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


def make_settings(technology: str = "rfid") -> Settings:
    config = Settings()
    config.technology = technology
    config.api_base_url = BASE_URL
    config.cache_ttl_seconds = 300
    config.fetch_timeout_seconds = 5
    config.latest_limit = 60
    config.timezone = TZ
    config.environment = "test"
    return config


@pytest.fixture
def rfid_upstream() -> FakeUpstream:
    return FakeUpstream(RFID_COLLECTIONS)


@pytest.fixture
def ble_upstream() -> FakeUpstream:
    return FakeUpstream(BLE_COLLECTIONS)


@pytest.fixture
def rfid_client(rfid_upstream):
    with TestClient(create_app(make_settings("rfid"), transport=rfid_upstream.transport)) as client:
        yield client


@pytest.fixture
def ble_client(ble_upstream):
    with TestClient(create_app(make_settings("ble"), transport=ble_upstream.transport)) as client:
        yield client
