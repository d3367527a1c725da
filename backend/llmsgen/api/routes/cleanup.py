"""Expired run sweep, triggered by an external scheduler."""

import hmac
import logging

from fastapi import APIRouter, Query, Request

from llmsgen.api.deps import AppSettings, DbSession, RunRepo, commit
from llmsgen.config import Settings
from llmsgen.errors import Unauthorized

logger = logging.getLogger(__name__)
router = APIRouter(tags=["maintenance"])


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = (request.headers.get("authorization") or "").partition(" ")
    if scheme == "Bearer" and token:
        return token
    return None


def authorize_cleanup(settings: Settings, bearer: str | None, query_token: str | None = None) -> None:
    """Require the configured cleanup token as a bearer header (or query token)."""
    expected = settings.cleanup_token
    provided = bearer or query_token
    if not expected or not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        raise Unauthorized()


async def _sweep(runs: RunRepo, db: DbSession) -> dict[str, int]:
    deleted = await runs.delete_expired()
    await commit(db)
    logger.info(f"Cleanup removed {deleted} expired runs")
    return {"deleted": deleted}


@router.post("/cleanup")
async def cleanup_post(
    request: Request,
    settings: AppSettings,
    runs: RunRepo,
    db: DbSession,
) -> dict[str, int]:
    """Delete expired runs. Requires ``Authorization: Bearer <token>``."""
    authorize_cleanup(settings, _bearer_token(request))
    return await _sweep(runs, db)


@router.get("/cleanup")
async def cleanup_get(
    request: Request,
    settings: AppSettings,
    runs: RunRepo,
    db: DbSession,
    token: str | None = Query(None),
) -> dict[str, int]:
    """Delete expired runs. Accepts a bearer header or ``?token=``."""
    authorize_cleanup(settings, _bearer_token(request), token)
    return await _sweep(runs, db)
