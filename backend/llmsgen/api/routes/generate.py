"""llms.txt generation route."""

from fastapi import APIRouter, Request
from pydantic import ValidationError, field_validator
from pydantic.alias_generators import to_camel

from llmsgen.api.deps import (
    AppSettings,
    DbSession,
    PageCrawler,
    PageEnricher,
    RunRepo,
    commit,
    read_json_body,
)
from llmsgen.api.schemas import CamelModel
from llmsgen.errors import SurveyValidationError
from llmsgen.services import SiteType, SurveyInput, generate_run

router = APIRouter()


class SurveyRequest(CamelModel):
    """Survey answers as posted by the form. Missing fields default to blank."""

    site_name: str = ""
    site_url: str = ""
    summary: str = ""
    categories: str = ""
    site_type: SiteType = SiteType.DOCS
    excludes: str = ""
    priority_pages: str = ""
    optional_pages: str = ""
    questions: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def blank_nulls(cls, value, info):
        if value is None:
            return SiteType.DOCS if info.field_name == "site_type" else ""
        return value

    def to_survey(self) -> SurveyInput:
        return SurveyInput(
            site_name=self.site_name,
            site_url=self.site_url,
            summary=self.summary,
            categories=self.categories,
            site_type=self.site_type,
            excludes=self.excludes,
            priority_pages=self.priority_pages,
            optional_pages=self.optional_pages,
            questions=self.questions,
        )


class PaymentInfo(CamelModel):
    provider: str = "Stripe Checkout"
    price_usd: int
    billing: str = "one-time"
    pay_after: bool = True


class GenerateResponse(CamelModel):
    run_id: str
    preview: str
    locked_preview: str
    mode: str
    payment: PaymentInfo


def _field_errors(error: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item["loc"] else "body"
        errors.setdefault(field, item["msg"])
    return errors


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    request: Request,
    db: DbSession,
    runs: RunRepo,
    crawler: PageCrawler,
    enricher: PageEnricher,
    settings: AppSettings,
) -> GenerateResponse:
    """Generate llms.txt for a survey and return the split preview."""
    payload = await read_json_body(request)
    try:
        survey_request = SurveyRequest.model_validate(payload)
    except ValidationError as e:
        raise SurveyValidationError(_field_errors(e)) from e

    try:
        outcome = await generate_run(survey_request.to_survey(), runs, crawler, enricher)
    except SurveyValidationError as e:
        raise SurveyValidationError(
            {to_camel(field): message for field, message in e.errors.items()}
        ) from e
    await commit(db)

    return GenerateResponse(
        run_id=outcome.run.id,
        preview=outcome.preview.visible,
        locked_preview=outcome.preview.locked,
        mode=outcome.mode,
        payment=PaymentInfo(price_usd=settings.price_usd),
    )
