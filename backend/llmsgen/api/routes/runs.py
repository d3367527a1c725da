"""Run status and paid download routes."""

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse

from llmsgen.api.deps import RunRepo
from llmsgen.api.schemas import CamelModel
from llmsgen.errors import BadRequest, PaymentRequired, RunNotFound
from llmsgen.models import Run
from llmsgen.repositories import PostgresRunRepository

router = APIRouter()


class RunStatusResponse(CamelModel):
    run_id: str
    paid: bool


async def get_run_or_404(runs: PostgresRunRepository, run_id: str | None) -> Run:
    if not run_id:
        raise BadRequest("Missing runId.")
    run = await runs.get_active(run_id)
    if run is None:
        raise RunNotFound()
    return run


@router.get("/run", response_model=RunStatusResponse)
async def get_run_status(
    runs: RunRepo,
    run_id: str | None = Query(None, alias="runId"),
) -> RunStatusResponse:
    """Report whether a run has been paid for."""
    run = await get_run_or_404(runs, run_id)
    return RunStatusResponse(run_id=run_id, paid=run.is_paid)


@router.get("/download")
async def download_llmstxt(
    runs: RunRepo,
    run_id: str | None = Query(None, alias="runId"),
) -> PlainTextResponse:
    """Download the full llms.txt once the run is paid."""
    run = await get_run_or_404(runs, run_id)
    if not run.is_paid:
        raise PaymentRequired()

    return PlainTextResponse(
        content=run.content,
        media_type="text/plain",
        headers={
            "Content-Disposition": 'attachment; filename="llms.txt"',
            "Cache-Control": "no-store",
        },
    )
