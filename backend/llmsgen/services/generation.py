"""End-to-end generation: survey in, persisted run and preview out."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from llmsgen.errors import PersistenceFailure, SurveyValidationError
from llmsgen.models import Run
from llmsgen.repositories import PostgresRunRepository
from llmsgen.services.discovery import Crawler, DiscoveryMode, generate_llms
from llmsgen.services.llm_enricher import Enricher, enrich_pages_and_questions
from llmsgen.services.preview import PreviewSlices, build_preview_slices
from llmsgen.services.survey import SurveyInput, validate_survey
from llmsgen.services.template_builder import build_template

logger = logging.getLogger(__name__)


@dataclass
class GenerationOutcome:
    run: Run
    preview: PreviewSlices
    mode: DiscoveryMode
    enriched: bool


async def generate_run(
    survey: SurveyInput,
    runs: PostgresRunRepository,
    crawler: Crawler | None = None,
    enricher: Enricher | None = None,
) -> GenerationOutcome:
    """Validate, discover, enrich, persist and split the preview.

    Raises:
        SurveyValidationError: survey answers are invalid
        PersistenceFailure: the run could not be stored
    """
    errors = validate_survey(survey)
    if errors:
        raise SurveyValidationError(errors)

    discovery = await generate_llms(survey, crawler)
    content = discovery.preview

    enrichment = await enrich_pages_and_questions(survey, discovery.pages, enricher)
    if enrichment.used:
        content = build_template(survey, enrichment.pages, questions=enrichment.questions)

    try:
        run = await runs.create(content)
    except SQLAlchemyError as e:
        logger.error(f"Failed to persist run: {e}")
        raise PersistenceFailure() from e

    logger.info(f"Created run {run.id} (mode={discovery.mode}, enriched={enrichment.used})")
    return GenerationOutcome(
        run=run,
        preview=build_preview_slices(content),
        mode=discovery.mode,
        enriched=enrichment.used,
    )
