"""Dependency injection for FastAPI routes."""

from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from llmsgen.config import Settings
from llmsgen.database import get_db
from llmsgen.errors import BadRequest, PersistenceFailure
from llmsgen.repositories import PostgresRunRepository
from llmsgen.services.crawler_factory import get_crawler_service
from llmsgen.services.discovery import Crawler
from llmsgen.services.llm_enricher import Enricher, get_enricher
from llmsgen.services.payments import PaymentService
from llmsgen.services.stripe_gateway import StripeGateway


def get_app_settings(request: Request) -> Settings:
    """Settings the app was built with (see ``create_app``)."""
    return request.app.state.settings


# Type aliases for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]


def get_run_repository(db: DbSession, settings: AppSettings) -> PostgresRunRepository:
    return PostgresRunRepository(db, ttl=timedelta(hours=settings.run_ttl_hours))


def get_crawler(settings: AppSettings) -> Crawler | None:
    return get_crawler_service(settings)


def get_llm_enricher(settings: AppSettings) -> Enricher | None:
    return get_enricher(settings)


def get_payment_gateway(settings: AppSettings) -> StripeGateway:
    return StripeGateway(settings)


RunRepo = Annotated[PostgresRunRepository, Depends(get_run_repository)]
PageCrawler = Annotated[Crawler | None, Depends(get_crawler)]
PageEnricher = Annotated[Enricher | None, Depends(get_llm_enricher)]


def get_payment_service(
    settings: AppSettings,
    runs: RunRepo,
    gateway: Annotated[StripeGateway, Depends(get_payment_gateway)],
) -> PaymentService:
    return PaymentService(settings, runs, gateway)


Payments = Annotated[PaymentService, Depends(get_payment_service)]


async def commit(db: AsyncSession) -> None:
    """Commit the request's session, mapping database errors to a 500."""
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise PersistenceFailure() from e


async def read_json_body(request: Request) -> object:
    """Parse the request body as JSON, raising a 400 on malformed input."""
    try:
        return await request.json()
    except ValueError as e:
        raise BadRequest("Invalid JSON payload.") from e
