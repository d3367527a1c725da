"""Tests for POST /api/generate."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from llmsgen.api.deps import get_crawler, get_llm_enricher
from llmsgen.services.llm_enricher import Enrichment, PageUpdate

from conftest import ATLAS_SURVEY


class TestGenerate:
    def test_returns_split_preview_and_payment_info(self, client):
        resp = client.post("/api/generate", json=ATLAS_SURVEY)
        assert resp.status_code == 200
        data = resp.json()

        assert data["mode"] == "stub"
        assert data["preview"].startswith("# Atlas\n\n> A clear description")
        assert data["lockedPreview"].startswith("\n")
        assert "Getting started" not in data["lockedPreview"]
        assert data["payment"] == {
            "provider": "Stripe Checkout",
            "priceUsd": 8,
            "billing": "one-time",
            "payAfter": True,
        }

    def test_new_run_is_unpaid(self, client):
        run_id = client.post("/api/generate", json=ATLAS_SURVEY).json()["runId"]
        resp = client.get("/api/run", params={"runId": run_id})
        assert resp.json() == {"runId": run_id, "paid": False}

    def test_validation_errors_use_form_field_names(self, client):
        resp = client.post("/api/generate", json={**ATLAS_SURVEY, "priorityPages": "/a", "summary": "short"})
        assert resp.status_code == 400
        assert resp.json() == {
            "errors": {
                "summary": "Provide a short, factual sentence (20+ characters).",
                "priorityPages": "Add 3-8 priority URLs.",
            }
        }

    def test_unknown_site_type(self, client):
        resp = client.post("/api/generate", json={**ATLAS_SURVEY, "siteType": "blog"})
        assert resp.status_code == 400
        assert "siteType" in resp.json()["errors"]

    def test_null_fields_are_treated_as_blank(self, client):
        resp = client.post("/api/generate", json={**ATLAS_SURVEY, "optionalPages": None, "siteType": None})
        assert resp.status_code == 200

    def test_malformed_json(self, client):
        resp = client.post(
            "/api/generate",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON payload."}

    def test_live_crawl_and_enrichment(self, app, client):
        crawler = MagicMock()
        crawler.crawl_website = AsyncMock(return_value=[
            {"url": "https://atlas.test/docs/intro", "title": "Intro", "description": "Intro page"},
        ])
        enricher = MagicMock()
        enricher.enrich = AsyncMock(return_value=Enrichment(
            questions=["Is there an API?"],
            page_updates=[PageUpdate(url="https://atlas.test/docs/intro", title="Introduction")],
        ))
        app.dependency_overrides[get_crawler] = lambda: crawler
        app.dependency_overrides[get_llm_enricher] = lambda: enricher

        resp = client.post("/api/generate", json=ATLAS_SURVEY)

        assert resp.status_code == 200
        assert resp.json()["mode"] == "live"
        crawler.crawl_website.assert_awaited_once()
        enricher.enrich.assert_awaited_once()

    def test_crawl_failure_still_generates(self, app, client):
        crawler = SimpleNamespace(crawl_website=AsyncMock(side_effect=RuntimeError("down")))
        app.dependency_overrides[get_crawler] = lambda: crawler

        resp = client.post("/api/generate", json=ATLAS_SURVEY)

        assert resp.status_code == 200
        assert resp.json()["mode"] == "stub"

    def test_enrichment_failure_still_generates(self, app, client):
        enricher = SimpleNamespace(enrich=AsyncMock(side_effect=json.JSONDecodeError("bad", "", 0)))
        app.dependency_overrides[get_llm_enricher] = lambda: enricher

        resp = client.post("/api/generate", json=ATLAS_SURVEY)

        assert resp.status_code == 200
