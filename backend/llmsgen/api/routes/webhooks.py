"""Webhook endpoints for external service callbacks."""

import logging
from typing import Any

from fastapi import APIRouter, Request

from llmsgen.api.deps import DbSession, Payments, commit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stripe", tags=["webhooks"])


@router.post("/webhook")
async def handle_stripe_webhook(
    request: Request,
    db: DbSession,
    payments: Payments,
) -> dict[str, Any]:
    """Handle a Stripe event.

    The signature is checked against the raw body, so the payload must not
    be parsed before verification. Verified events we don't act on are still
    acknowledged so Stripe stops retrying them.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    if await payments.handle_webhook(payload, signature):
        await commit(db)

    return {"received": True}
