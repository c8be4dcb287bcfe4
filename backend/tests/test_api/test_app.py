"""
Application-level tests: service endpoints, error rendering, rate limiting
and request logging
"""
import logging

from fastapi.testclient import TestClient

from grocer.core.clock import utc_now
from grocer.core.config import Settings
from grocer.core.database import InMemoryDatabase
from grocer.core.rate_limit import RateLimiter
from grocer.main import create_app


def build_client(**overrides) -> TestClient:
    settings = Settings(_env_file=None, LOG_LEVEL="WARNING", **overrides)
    return TestClient(create_app(settings=settings, db=InMemoryDatabase()))


class TestServiceEndpoints:

    def test_root(self, client):
        body = client.get("/").json()

        assert body["status"] == "online"
        assert body["message"] == "YourGrocer API"

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["database"]["stores"] == 3
        assert body["database"]["products"] == 21

    def test_default_clock_is_utc(self):
        app = build_client().app

        assert app.state.clock is utc_now
        assert utc_now().tzinfo is not None

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json()["status"] == "error"

    def test_seeding_can_be_disabled(self):
        client = build_client(SEED_SAMPLE_DATA=False, RATE_LIMIT_ENABLED=False)

        assert client.get("/api/stores").json()["count"] == 0

    def test_unhandled_error_is_500(self, app):
        @app.get("/api/boom")
        async def boom():
            raise RuntimeError("kaboom")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/api/boom")

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Internal Server Error"}


class TestRateLimiting:

    def test_limit_returns_429_with_retry_after(self):
        client = build_client(SEED_SAMPLE_DATA=False, RATE_LIMIT_PER_MINUTE=3)

        statuses = [client.get("/api/categories").status_code for _ in range(4)]

        assert statuses == [200, 200, 200, 429]
        limited = client.get("/api/categories")
        assert int(limited.headers["Retry-After"]) >= 1
        assert limited.json()["status"] == "error"

    def test_exempt_paths(self):
        client = build_client(SEED_SAMPLE_DATA=False, RATE_LIMIT_PER_MINUTE=1)

        assert all(client.get("/health").status_code == 200 for _ in range(5))

    def test_each_app_has_its_own_limiter(self):
        first = build_client(SEED_SAMPLE_DATA=False, RATE_LIMIT_PER_MINUTE=1)
        second = build_client(SEED_SAMPLE_DATA=False, RATE_LIMIT_PER_MINUTE=1)

        assert first.get("/api/categories").status_code == 200
        assert second.get("/api/categories").status_code == 200

    def test_sliding_window(self):
        now = [1000.0]
        limiter = RateLimiter(clock=lambda: now[0])

        assert limiter.is_allowed("ip:1", 2)[0]
        assert limiter.is_allowed("ip:1", 2)[0]
        allowed, remaining, retry_after = limiter.is_allowed("ip:1", 2)
        assert (allowed, remaining, retry_after) == (False, 0, 61)

        now[0] += 61
        assert limiter.is_allowed("ip:1", 2) == (True, 1, 0)


class TestRequestLogging:

    def test_requests_are_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="grocer.main"):
            client.get("/api/categories")

        assert any("GET /api/categories 200 in" in record.getMessage() for record in caplog.records)
