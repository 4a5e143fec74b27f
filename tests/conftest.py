# pylint: disable=redefined-outer-name
import random

import fakeredis
import pytest
from fastapi.testclient import TestClient

from provenance.service_layer.tracker import SupplyChainTracker
from provenance.service_layer.unit_of_work import InMemoryUnitOfWork, TrackerStore


@pytest.fixture
def rng():
    """Seeded random source so jitter and batch numbers are repeatable."""
    return random.Random(1234)


@pytest.fixture
def store():
    return TrackerStore()


@pytest.fixture
def uow(store, rng):
    return InMemoryUnitOfWork(store=store, rng=rng)


@pytest.fixture
def tracker(store, rng):
    return SupplyChainTracker(store=store, rng=rng)


@pytest.fixture
def widget(tracker):
    """Product P1 registered with a fixed batch number."""
    return tracker.register(
        "Widget", "Acme", "DistCo", "Shop", "Bob", 1.0, 2.0,
        product_id="P1", batch_number="BATCH1234",
    )


@pytest.fixture
def fake_redis(monkeypatch):
    """Route event publishing to an in-memory Redis."""
    from provenance.adapters import redis_publisher

    client = fakeredis.FakeRedis()
    monkeypatch.setattr(redis_publisher, "r", client)
    return client


@pytest.fixture
def api_client(monkeypatch, rng):
    """API client bound to a fresh tracker seeded with the demo products."""
    from provenance.entrypoints import tracker_api

    monkeypatch.setenv("SEED_SAMPLE_PRODUCTS", "true")
    monkeypatch.setattr(tracker_api, "tracker", SupplyChainTracker(rng=rng))
    with TestClient(tracker_api.app) as client:
        yield client
