"""Shared fixtures: NEO record factory, in-memory persistence and an API client
wired to fake upstream services."""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from cosmic_watch import dependencies
from cosmic_watch.accounts import SessionManager
from cosmic_watch.agents.cosmo_chat import CosmoChat
from cosmic_watch.main import app
from cosmic_watch.neows import FeedError
from cosmic_watch.storage import InMemoryStore


def _neo(
    neo_id="2000433",
    name="433 Eros (A898 PA)",
    hazardous=False,
    diameter_km=0.0,
    miss_km="7500000",
    velocity_kph="50000",
    approach_date="2026-10-19",
    with_approach=True,
):
    record = {
        "id": neo_id,
        "neo_reference_id": neo_id,
        "name": name,
        "is_potentially_hazardous_asteroid": hazardous,
        "estimated_diameter": {
            "kilometers": {"estimated_diameter_min": diameter_km / 2, "estimated_diameter_max": diameter_km},
            "meters": {"estimated_diameter_min": diameter_km * 500, "estimated_diameter_max": diameter_km * 1000},
        },
        "close_approach_data": [],
    }
    if with_approach:
        record["close_approach_data"] = [
            {
                "close_approach_date": approach_date,
                "miss_distance": {"kilometers": miss_km},
                "relative_velocity": {"kilometers_per_hour": velocity_kph},
                "orbiting_body": "Earth",
            }
        ]
    return record


@pytest.fixture
def make_neo():
    """Factory for NeoWs-shaped records."""
    return _neo


@pytest.fixture
def feed_payload(make_neo):
    return {
        "element_count": 4,
        "near_earth_objects": {
            "2026-10-19": [
                make_neo("1", "(2026 AA)", hazardous=True, diameter_km=0.8, miss_km="1500000", velocity_kph="80000"),
                make_neo("2", "(2026 BB)", diameter_km=0.02, miss_km="7000000", velocity_kph="20000"),
            ],
            "2026-10-20": [
                make_neo("3", "(2026 CC)", diameter_km=0.3, miss_km="3750000", velocity_kph="45000",
                         approach_date="2026-10-20"),
                make_neo("4", "Apophis", hazardous=True, diameter_km=0.37, miss_km="38000",
                         velocity_kph="30000", approach_date="2026-10-20"),
            ],
        },
    }


class FakeFeedClient:
    """Stands in for NeoWsClient; records calls, serves a fixed payload."""

    def __init__(self, payload=None, error=None):
        self.payload = payload or {"near_earth_objects": {}}
        self.error = error
        self.calls = []

    def fetch_feed(self, start_date=None, end_date=None):
        self.calls.append((start_date, end_date))
        if self.error:
            raise self.error
        return self.payload


class FakeMessages:
    def __init__(self, text="Apophis will miss Earth in 2029.", error=None):
        self.text = text
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def feed_client(feed_payload):
    return FakeFeedClient(feed_payload)


@pytest.fixture
def fake_messages():
    return FakeMessages()


@pytest.fixture
def api(store, feed_client, fake_messages):
    """TestClient with persistence, sessions and upstreams replaced."""
    sessions = SessionManager()
    app.dependency_overrides[dependencies.get_kv_store] = lambda: store
    app.dependency_overrides[dependencies.get_sessions] = lambda: sessions
    app.dependency_overrides[dependencies.get_feed_client] = lambda: feed_client
    app.dependency_overrides[dependencies.get_chat] = lambda: CosmoChat(
        client=SimpleNamespace(messages=fake_messages)
    )
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def _signup(api, email, role="observer", password="hunter2"):
    resp = api.post("/api/auth/signup", json={"email": email, "password": password, "role": role})
    assert resp.status_code == 201, resp.text
    return {"X-Session-Token": resp.json()["token"]}


@pytest.fixture
def signup():
    """Register a user through the API and return their session header."""
    return _signup


@pytest.fixture
def researcher(api):
    return _signup(api, "vera@observatory.org", role="researcher")


@pytest.fixture
def observer(api):
    return _signup(api, "otto@example.com", role="observer")


@pytest.fixture
def failing_feed():
    return FakeFeedClient(error=FeedError("NASA API: Rate limit exceeded.", 429))
