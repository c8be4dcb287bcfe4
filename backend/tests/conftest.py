"""
Pytest fixtures and configuration for YourGrocer backend tests

This file provides shared fixtures that can be used across all test modules.
Every test gets a fresh in-memory database and application.
"""
import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from grocer.core.config import Settings
from grocer.core.database import InMemoryDatabase
from grocer.main import create_app
from grocer.services.seed_service import seed_sample_data

VENDOR_PASSWORD = "vendor123"


class FakeClock:
    """Controllable replacement for the app clock"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def test_settings():
    """
    Settings for tests: sample data on, rate limiting off

    .env is ignored so local configuration can't leak into tests
    """
    return Settings(
        _env_file=None,
        SEED_SAMPLE_DATA=True,
        RATE_LIMIT_ENABLED=False,
        DEMO_VENDOR_PASSWORD=VENDOR_PASSWORD,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def db():
    """Empty in-memory database"""
    return InMemoryDatabase()


@pytest.fixture
def seeded_db(db):
    """In-memory database with the sample marketplace"""
    seed_sample_data(db, VENDOR_PASSWORD)
    return db


@pytest.fixture
def clock():
    """Fake clock starting at 2025-01-01 12:00 UTC"""
    return FakeClock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def app(test_settings, db, clock):
    """
    Application wired to the test database and fake clock

    Scope: function (new app per test)
    """
    application = create_app(settings=test_settings, db=db)
    application.state.clock = clock
    application.state.rng = random.Random(1234)
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register_user(client):
    """
    Factory that registers a user and returns (auth headers, user dict)

    Usage:
        headers, user = register_user("alice")
    """
    def _register(username: str, is_vendor: bool = False, address: str = "42 Customer Street"):
        response = client.post("/api/register", json={
            "username": username,
            "password": "secret123",
            "name": username.title(),
            "email": f"{username}@mail.com",
            "address": address,
            "phone": "5550100",
            "is_vendor": is_vendor,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]

    return _register


@pytest.fixture
def customer_headers(register_user):
    headers, _ = register_user("alice")
    return headers


@pytest.fixture
def vendor_headers(client):
    """Auth headers for the seeded demo vendor (owner of stores 1-3)"""
    response = client.post("/api/vendor/login", json={"username": "vendor", "password": VENDOR_PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def sample_store_data():
    """
    Provides sample store data for tests
    """
    return {
        "name": "Corner Fresh",
        "description": "Neighbourhood fruit and vegetable shop",
        "address": "9 Side Road",
        "location": "12.9000,77.6000",
        "delivery_time": "15-25 min",
        "delivery_fee": 15,
        "min_order": 40,
        "opening_hours": "8AM - 8PM",
    }


@pytest.fixture
def sample_order_data():
    """
    Order at More SuperMarket (store 1): 2 x Amul Butter + 1 x Amul Paneer

    Subtotal 310, delivery fee 30
    """
    return {
        "store_id": 1,
        "delivery_address": "42 Customer Street",
        "items": [
            {"product_id": 1, "quantity": 2},
            {"product_id": 2, "quantity": 1},
        ],
    }
