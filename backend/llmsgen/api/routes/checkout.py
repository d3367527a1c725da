"""Stripe Checkout session creation route."""

from fastapi import APIRouter, Request

from llmsgen.api.deps import AppSettings, Payments, read_json_body
from llmsgen.errors import BadRequest

router = APIRouter()


@router.post("/checkout")
async def create_checkout(
    request: Request,
    payments: Payments,
    settings: AppSettings,
) -> dict[str, str]:
    """Create a one-time Checkout session for an unpaid run."""
    payload = await read_json_body(request)
    run_id = payload.get("runId") if isinstance(payload, dict) else None
    if not run_id or not isinstance(run_id, str):
        raise BadRequest("Missing runId.")

    origin = settings.public_base_url or str(request.base_url)
    url = await payments.create_checkout(run_id, origin)
    return {"url": url}
