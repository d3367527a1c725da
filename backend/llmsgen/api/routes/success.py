"""Post-checkout landing data."""

from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse

from llmsgen.api.deps import RunRepo
from llmsgen.api.schemas import CamelModel
from llmsgen.errors import RunNotFound

router = APIRouter()


class SuccessResponse(CamelModel):
    run_id: str
    paid: bool
    content: str | None = None


@router.get("/success", response_model=SuccessResponse)
async def checkout_success(
    runs: RunRepo,
    run_id: str | None = Query(None, alias="runId"),
):
    """Landing data after Stripe redirects back.

    The webhook may arrive after the redirect, so clients poll this until
    ``paid`` flips; content is only included once paid.
    """
    if not run_id:
        return RedirectResponse("/", status_code=302)

    run = await runs.get_active(run_id)
    if run is None:
        raise RunNotFound("Run not found. It may have expired.")

    return SuccessResponse(
        run_id=run_id,
        paid=run.is_paid,
        content=run.content if run.is_paid else None,
    )
