"""Shared fixtures.

The API runs against an in-memory SQLite database created by the app's own
lifespan. The run repository gets a controllable clock so tests can move
past the 24h expiry, and the Stripe gateway talks to an
``httpx.MockTransport`` instead of the network.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from llmsgen.api.deps import AppSettings, DbSession, get_payment_gateway, get_run_repository
from llmsgen.config import Settings
from llmsgen.main import create_app
from llmsgen.repositories import PostgresRunRepository
from llmsgen.services.stripe_gateway import StripeGateway, compute_signature

WEBHOOK_SECRET = "whsec_test"
CLEANUP_TOKEN = "cleanup-secret"

ATLAS_SURVEY = {
    "siteName": "Atlas",
    "siteUrl": "https://atlas.test",
    "summary": "A clear description that is longer than twenty characters.",
    "categories": "Docs",
    "siteType": "docs",
    "priorityPages": "/pricing, /docs, /docs/getting-started",
    "questions": "pricing, setup",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StripeStub:
    """Records checkout requests and replies with a canned response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: dict = {"id": "cs_test_1", "url": "https://checkout.stripe.test/session"}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


def signed_headers(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> dict:
    ts = int(time.time()) if timestamp is None else timestamp
    return {"stripe-signature": f"t={ts},v1={compute_signature(payload, ts, secret)}"}


def paid_event(run_id: str, payment_status: str = "paid", **session_fields) -> str:
    session = {
        "id": "cs_test_1",
        "payment_status": payment_status,
        "metadata": {"run_id": run_id},
        **session_fields,
    }
    return json.dumps({"type": "checkout.session.completed", "data": {"object": session}})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        create_tables=True,
        firecrawl_api_key=None,
        firecrawl_use_stub=True,
        openai_api_key=None,
        stripe_secret_key="sk_test",
        stripe_price_id="price_test",
        stripe_webhook_secret=WEBHOOK_SECRET,
        cleanup_token=CLEANUP_TOKEN,
        public_base_url="https://app.test",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def stripe_stub() -> StripeStub:
    return StripeStub()


@pytest.fixture()
def app(settings, clock, stripe_stub):
    app = create_app(settings)

    def run_repository(db: DbSession, app_settings: AppSettings) -> PostgresRunRepository:
        return PostgresRunRepository(
            db,
            ttl=timedelta(hours=app_settings.run_ttl_hours),
            clock=clock,
        )

    def payment_gateway(app_settings: AppSettings) -> StripeGateway:
        return StripeGateway(app_settings, transport=httpx.MockTransport(stripe_stub.handler))

    app.dependency_overrides[get_run_repository] = run_repository
    app.dependency_overrides[get_payment_gateway] = payment_gateway
    return app


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def run_id(client) -> str:
    """A freshly generated, unpaid run."""
    resp = client.post("/api/generate", json=ATLAS_SURVEY)
    assert resp.status_code == 200, resp.text
    return resp.json()["runId"]
