"""Business logic services."""

from llmsgen.services.crawler_factory import get_crawler_service
from llmsgen.services.discovery import DiscoveryResult, generate_llms
from llmsgen.services.firecrawl_crawler import FirecrawlCrawler
from llmsgen.services.generation import GenerationOutcome, generate_run
from llmsgen.services.llm_enricher import (
    EnrichmentResult,
    OpenAIEnricher,
    enrich_pages_and_questions,
    get_enricher,
)
from llmsgen.services.payments import PaymentService
from llmsgen.services.preview import PreviewSlices, build_preview_slices
from llmsgen.services.stripe_gateway import StripeGateway, verify_signature
from llmsgen.services.survey import PageItem, SiteType, SurveyInput, validate_survey
from llmsgen.services.template_builder import build_stub_pages, build_template

__all__ = [
    "DiscoveryResult",
    "EnrichmentResult",
    "FirecrawlCrawler",
    "GenerationOutcome",
    "OpenAIEnricher",
    "PageItem",
    "PaymentService",
    "PreviewSlices",
    "SiteType",
    "StripeGateway",
    "SurveyInput",
    "build_preview_slices",
    "build_stub_pages",
    "build_template",
    "enrich_pages_and_questions",
    "generate_llms",
    "generate_run",
    "get_crawler_service",
    "get_enricher",
    "validate_survey",
    "verify_signature",
]
