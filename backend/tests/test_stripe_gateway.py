"""Tests for webhook signature verification and Stripe Checkout creation.

Checkout requests go to an ``httpx.MockTransport``.
"""

from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from llmsgen.config import Settings
from llmsgen.errors import UpstreamFailure
from llmsgen.services.stripe_gateway import (
    StripeGateway,
    compute_signature,
    parse_signature_header,
    verify_signature,
)

SECRET = "whsec_test"
PAYLOAD = '{"type":"checkout.session.completed"}'
NOW = 1_700_000_000


def _header(payload=PAYLOAD, timestamp=NOW, secret=SECRET) -> str:
    return f"t={timestamp},v1={compute_signature(payload, timestamp, secret)}"


def _gateway(handler) -> StripeGateway:
    settings = Settings(_env_file=None, stripe_secret_key="sk_test", stripe_price_id="price_123")
    return StripeGateway(settings, transport=httpx.MockTransport(handler))


# ===========================================================================
# Signatures
# ===========================================================================

class TestParseSignatureHeader:
    def test_multiple_v1_values(self):
        parsed = parse_signature_header("t=1,v1=aa,v0=zz,v1=bb")
        assert parsed.timestamp == "1"
        assert parsed.signatures == ["aa", "bb"]

    @pytest.mark.parametrize("header", ["", "v1=aa", "t=1", "garbage"])
    def test_incomplete_headers(self, header):
        assert parse_signature_header(header) is None


class TestVerifySignature:
    def test_valid(self):
        assert verify_signature(PAYLOAD, _header(), SECRET, now=NOW)

    def test_accepts_bytes_payload(self):
        assert verify_signature(PAYLOAD.encode(), _header(), SECRET, now=NOW)

    def test_any_matching_v1_is_enough(self):
        header = f"t={NOW},v1=deadbeef,v1={compute_signature(PAYLOAD, NOW, SECRET)}"
        assert verify_signature(PAYLOAD, header, SECRET, now=NOW)

    def test_tampered_payload(self):
        assert not verify_signature(PAYLOAD + " ", _header(), SECRET, now=NOW)

    def test_wrong_secret(self):
        assert not verify_signature(PAYLOAD, _header(secret="whsec_other"), SECRET, now=NOW)

    def test_outside_tolerance(self):
        assert not verify_signature(PAYLOAD, _header(), SECRET, tolerance=300, now=NOW + 301)

    def test_non_numeric_timestamp(self):
        header = f"t=soon,v1={compute_signature(PAYLOAD, 'soon', SECRET)}"
        assert not verify_signature(PAYLOAD, header, SECRET, now=NOW)


# ===========================================================================
# Checkout
# ===========================================================================

class TestCreateCheckoutSession:
    def test_posts_form_and_returns_url(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "cs_1", "url": "https://checkout.stripe.test/cs_1"})

        url = asyncio.run(_gateway(handler).create_checkout_session("run-1", "https://app.test/"))

        assert url == "https://checkout.stripe.test/cs_1"
        request = seen[0]
        assert request.url.path == "/v1/checkout/sessions"
        assert request.headers["Authorization"] == "Bearer sk_test"
        assert request.headers["Idempotency-Key"] == "checkout-run-1"
        form = parse_qs(request.content.decode())
        assert form["mode"] == ["payment"]
        assert form["line_items[0][price]"] == ["price_123"]
        assert form["metadata[run_id]"] == ["run-1"]
        assert form["success_url"] == ["https://app.test/success?runId=run-1"]

    def test_provider_error_carries_details(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "No such price"}})

        with pytest.raises(UpstreamFailure) as exc_info:
            asyncio.run(_gateway(handler).create_checkout_session("run-1", "https://app.test"))

        assert exc_info.value.status_code == 502
        assert exc_info.value.to_dict() == {"error": "Stripe checkout failed.", "details": "No such price"}

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable")

        with pytest.raises(UpstreamFailure):
            asyncio.run(_gateway(handler).create_checkout_session("run-1", "https://app.test"))

    def test_missing_url(self):
        with pytest.raises(UpstreamFailure):
            asyncio.run(_gateway(lambda r: httpx.Response(200, json={"id": "cs_1"})).create_checkout_session(
                "run-1", "https://app.test"
            ))
