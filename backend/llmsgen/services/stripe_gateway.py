"""Stripe Checkout client and webhook signature verification."""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass

import httpx

from llmsgen.config import Settings
from llmsgen.errors import UpstreamFailure

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


@dataclass
class SignatureHeader:
    """Parsed ``stripe-signature`` header."""

    timestamp: str
    signatures: list[str]


def parse_signature_header(header: str) -> SignatureHeader | None:
    """Parse ``t=<unix>,v1=<hex>[,v1=<hex>...]``; other schemes are ignored."""
    timestamp = None
    signatures = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t" and value:
            timestamp = value
        elif key == "v1" and value:
            signatures.append(value)

    if not timestamp or not signatures:
        return None
    return SignatureHeader(timestamp=timestamp, signatures=signatures)


def compute_signature(payload: str | bytes, timestamp: str | int, secret: str) -> str:
    """HMAC-SHA256 hex digest of ``{timestamp}.{payload}``."""
    body = payload.encode() if isinstance(payload, str) else payload
    signed = f"{timestamp}.".encode() + body
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def verify_signature(
    payload: str | bytes,
    header: str,
    secret: str,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    now: float | None = None,
) -> bool:
    """Check a webhook signature header against the raw request body.

    Valid when any ``v1`` value matches the expected digest and the
    timestamp is within ``tolerance`` seconds of ``now``.
    """
    parsed = parse_signature_header(header)
    if parsed is None:
        return False

    try:
        timestamp = int(parsed.timestamp)
    except ValueError:
        return False

    current = time.time() if now is None else now
    if abs(current - timestamp) > tolerance:
        return False

    expected = compute_signature(payload, parsed.timestamp, secret)
    return any(hmac.compare_digest(expected, candidate) for candidate in parsed.signatures)


def _error_details(response: httpx.Response) -> str:
    """Prefer Stripe's ``error.message``, else the raw body."""
    raw = response.text
    try:
        data = response.json()
    except ValueError:
        return raw
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"].get("message") or raw
    return raw


class StripeGateway:
    """Creates one-time Checkout sessions through the Stripe REST API."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.secret_key = settings.stripe_secret_key
        self.price_id = settings.stripe_price_id
        self.api_base = settings.stripe_api_base.rstrip("/")
        self.timeout = settings.stripe_timeout_seconds
        self.transport = transport

    async def create_checkout_session(self, run_id: str, origin: str) -> str:
        """Create a Checkout session for a run and return its redirect URL.

        The idempotency key is derived from the run id, so retrying this call
        returns the same session instead of creating another.

        Raises:
            UpstreamFailure: Stripe rejected the request or was unreachable
        """
        origin = origin.rstrip("/")
        params = {
            "mode": "payment",
            "success_url": f"{origin}/success?runId={run_id}",
            "cancel_url": f"{origin}/?checkout=cancel&runId={run_id}",
            "line_items[0][price]": self.price_id,
            "line_items[0][quantity]": "1",
            "client_reference_id": run_id,
            "metadata[run_id]": run_id,
        }
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Idempotency-Key": f"checkout-{run_id}",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.api_base,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.post("/v1/checkout/sessions", data=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Stripe checkout request failed for run {run_id}: {e}")
            raise UpstreamFailure("Stripe checkout failed.", details=str(e)) from e

        if response.is_error:
            details = _error_details(response)
            logger.error(f"Stripe checkout error ({response.status_code}): {details}")
            raise UpstreamFailure("Stripe checkout failed.", details=details)

        url = response.json().get("url")
        if not url:
            logger.error(f"Stripe checkout response for run {run_id} had no url")
            raise UpstreamFailure("Stripe checkout failed.")

        logger.info(f"Created Stripe checkout session for run {run_id}")
        return url
