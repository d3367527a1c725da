"""Payment gating: checkout creation and webhook-driven unlocking."""

import json
import logging
from typing import Any

from llmsgen.config import Settings
from llmsgen.errors import (
    InvalidSignature,
    MissingSignature,
    NotConfigured,
    RunAlreadyPaid,
    RunNotFound,
)
from llmsgen.repositories import PostgresRunRepository
from llmsgen.services.stripe_gateway import StripeGateway, verify_signature

logger = logging.getLogger(__name__)

PAID_EVENT_TYPES = {
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
}


def run_id_from_session(session: dict[str, Any]) -> str | None:
    """Run id from session metadata, else the client reference id."""
    metadata = session.get("metadata") or {}
    run_id = metadata.get("run_id") if isinstance(metadata, dict) else None
    return run_id or session.get("client_reference_id")


class PaymentService:
    """Glue between the run store and the payment provider."""

    def __init__(
        self,
        settings: Settings,
        runs: PostgresRunRepository,
        gateway: StripeGateway | None = None,
    ):
        self.settings = settings
        self.runs = runs
        self.gateway = gateway or StripeGateway(settings)

    async def create_checkout(self, run_id: str, origin: str) -> str:
        """Start checkout for an unpaid run and return the redirect URL.

        Raises:
            NotConfigured: Stripe keys are missing
            RunNotFound: run is absent or expired
            RunAlreadyPaid: run was already unlocked (no provider call is made)
            UpstreamFailure: Stripe rejected the request
        """
        if not self.settings.stripe_configured:
            raise NotConfigured("Stripe is not configured.")

        run = await self.runs.get_active(run_id)
        if run is None:
            raise RunNotFound()
        if run.is_paid:
            raise RunAlreadyPaid()

        return await self.gateway.create_checkout_session(run.id, origin)

    async def handle_webhook(self, payload: bytes, signature: str | None) -> bool:
        """Verify and apply a Stripe event.

        Returns:
            True if a run was marked paid by this event
        """
        secret = self.settings.stripe_webhook_secret
        if not secret:
            raise NotConfigured("Stripe webhook secret not configured.")
        if not signature:
            raise MissingSignature()

        if not verify_signature(
            payload,
            signature,
            secret,
            tolerance=self.settings.webhook_tolerance_seconds,
        ):
            logger.warning("Rejected Stripe webhook with invalid signature")
            raise InvalidSignature()

        try:
            event = json.loads(payload)
        except ValueError as e:
            raise InvalidSignature("Invalid webhook payload.") from e

        event_type = event.get("type") if isinstance(event, dict) else None
        if event_type not in PAID_EVENT_TYPES:
            logger.debug(f"Ignoring Stripe event {event_type}")
            return False

        data = event.get("data")
        session = data.get("object") if isinstance(data, dict) else None
        if not isinstance(session, dict):
            raise InvalidSignature("Invalid webhook payload.")

        payment_status = session.get("payment_status")
        if payment_status and payment_status != "paid":
            logger.info(f"Checkout session not settled (payment_status={payment_status})")
            return False

        run_id = run_id_from_session(session)
        if not run_id:
            logger.warning(f"Stripe event {event_type} has no run reference")
            return False

        run = await self.runs.mark_paid(run_id)
        if run is None:
            logger.warning(f"Payment received for unknown or expired run {run_id}")
            return False

        logger.info(f"Run {run_id} marked paid")
        return True
