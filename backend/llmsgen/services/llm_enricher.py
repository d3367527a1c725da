"""Best-effort LLM enrichment of page titles, descriptions and questions."""

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Protocol
from urllib.parse import urlparse

from openai import AsyncOpenAI, OpenAIError

from llmsgen.config import Settings
from llmsgen.prompts import ENRICHMENT_RESPONSE_SHAPE, ENRICHMENT_SYSTEM_PROMPT
from llmsgen.services.survey import PageItem, SiteType, SurveyInput, split_list
from llmsgen.services.template_builder import (
    normalize_base_url,
    normalize_for_match,
    resolve_url,
    slugify,
)

logger = logging.getLogger(__name__)

MAX_PAGES = 18
MAX_NEW_QUESTIONS = 4
MAX_TOTAL_QUESTIONS = 8
MAX_DESC_CHARS = 160
MAX_TITLE_CHARS = 80
MAX_SOURCE_CHARS = 220
MAX_KEYWORDS = 32

# Baseline relevance cues for ranking pages before sending to the model
STATIC_KEYWORDS = [
    "pricing",
    "plans",
    "billing",
    "docs",
    "documentation",
    "api",
    "support",
    "faq",
    "changelog",
    "security",
    "integrations",
    "getting-started",
    "guides",
    "tutorials",
    "status",
    "contact",
]

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")
_WHITESPACE = re.compile(r"\s+")


@dataclass
class PageUpdate:
    url: str
    title: str | None = None
    description: str | None = None


@dataclass
class Enrichment:
    """Successful model output."""

    questions: list[str] = field(default_factory=list)
    page_updates: list[PageUpdate] = field(default_factory=list)


@dataclass
class Degraded:
    """The enrichment provider could not be used; input stays unchanged."""

    reason: str


@dataclass
class EnrichmentResult:
    pages: list[PageItem]
    questions: list[str]
    used: bool


class Enricher(Protocol):
    async def enrich(
        self, survey: SurveyInput, candidates: list[PageItem]
    ) -> Enrichment | Degraded: ...


def trim_to(value: str, max_chars: int) -> str:
    clean = _WHITESPACE.sub(" ", value).strip()
    if len(clean) <= max_chars:
        return clean
    return f"{clean[:max(0, max_chars - 1)].strip()}…"


def question_key(value: str) -> str:
    return _TOKEN_SPLIT.sub("", value.lower())


def build_keyword_set(survey: SurveyInput) -> list[str]:
    """Mix categories, question tokens and static cues into one keyword list."""
    keywords: dict[str, None] = {}
    for category in split_list(survey.categories):
        keywords[category.lower()] = None
        keywords[slugify(category)] = None
    for question in split_list(survey.questions):
        for token in _TOKEN_SPLIT.split(question.lower()):
            if len(token) > 3:
                keywords[token] = None
    for keyword in STATIC_KEYWORDS:
        keywords[keyword] = None
    return list(keywords)[:MAX_KEYWORDS]


def _url_set(base_url: str, value: str) -> set[str]:
    resolved = (resolve_url(base_url, entry) for entry in split_list(value))
    return {normalize_for_match(url) for url in resolved if url}


def score_page(
    page: PageItem,
    keywords: list[str],
    priority_set: set[str],
    optional_set: set[str],
) -> int:
    key = normalize_for_match(page.url)
    score = 0
    if key in priority_set:
        score += 100
    if key in optional_set:
        score += 20

    haystack = f"{page.title} {page.description} {page.url}".lower()
    score += 4 * sum(1 for keyword in keywords if keyword and keyword in haystack)

    parsed = urlparse(page.url)
    if parsed.scheme and parsed.netloc:
        depth = len([segment for segment in parsed.path.split("/") if segment])
        score += max(0, 6 - depth)

    return score


def select_candidate_pages(survey: SurveyInput, pages: list[PageItem]) -> list[PageItem]:
    """Pick the highest-signal pages, ties kept in original order."""
    base_url = normalize_base_url(survey.site_url)
    keywords = build_keyword_set(survey)
    priority_set = _url_set(base_url, survey.priority_pages)
    optional_set = _url_set(base_url, survey.optional_pages)

    scored = [
        (score_page(page, keywords, priority_set, optional_set), index, page)
        for index, page in enumerate(pages)
    ]
    scored.sort(key=lambda entry: (-entry[0], entry[1]))
    return [page for _, _, page in scored[:MAX_PAGES]]


def build_prompt_payload(survey: SurveyInput, pages: list[PageItem]) -> dict[str, Any]:
    return {
        "site": {
            "name": survey.site_name,
            "url": survey.site_url,
            "summary": survey.summary,
            "categories": split_list(survey.categories),
            "siteType": SiteType(survey.site_type).value,
            "questions": split_list(survey.questions),
        },
        "pages": [
            {
                "url": page.url,
                "title": trim_to(page.title, MAX_TITLE_CHARS),
                "description": trim_to(page.description, MAX_SOURCE_CHARS),
            }
            for page in pages
        ],
    }


def parse_llm_response(content: str) -> dict | None:
    """Parse strict JSON, falling back to the outermost brace-delimited span."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        start = content.find("{")
        end = content.rfind("}")
        if start == -1 or end == -1:
            return None
        try:
            data = json.loads(content[start:end + 1])
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def _enrichment_from_response(data: dict) -> Enrichment:
    questions = data.get("questions")
    updates = data.get("pages")
    return Enrichment(
        questions=list(questions[:MAX_NEW_QUESTIONS]) if isinstance(questions, list) else [],
        page_updates=[
            PageUpdate(
                url=item["url"],
                title=item.get("title") if isinstance(item.get("title"), str) else None,
                description=item.get("description") if isinstance(item.get("description"), str) else None,
            )
            for item in (updates if isinstance(updates, list) else [])
            if isinstance(item, dict) and isinstance(item.get("url"), str) and item["url"]
        ],
    )


def merge_pages(pages: list[PageItem], updates: list[PageUpdate]) -> list[PageItem]:
    """Apply model edits to known URLs only, preserving URLs and sections."""
    merged = [replace(page) for page in pages]
    lookup = {normalize_for_match(page.url): page for page in merged}

    for update in updates:
        target = lookup.get(normalize_for_match(update.url))
        if target is None:
            continue
        if update.title and update.title.strip():
            target.title = trim_to(update.title, MAX_TITLE_CHARS)
        if update.description and update.description.strip():
            target.description = trim_to(update.description, MAX_DESC_CHARS)

    return merged


def merge_questions(existing: str, extra: list[Any]) -> list[str]:
    """Append new questions, skipping case/punctuation-insensitive duplicates."""
    existing_list = split_list(existing)
    seen = {question_key(value) for value in existing_list}

    additions = []
    for value in extra:
        if not isinstance(value, str) or not value.strip():
            continue
        key = question_key(value)
        if not key or key in seen:
            continue
        seen.add(key)
        additions.append(value.strip())

    return [*existing_list, *additions][:MAX_TOTAL_QUESTIONS]


def _chat_base_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    return base if base.endswith("/v1") else f"{base}/v1"


class OpenAIEnricher:
    """Enricher backed by an OpenAI-compatible chat completion endpoint."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        if client is None and not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required")

        self.model = settings.llm_model
        self.timeout = settings.enrichment_timeout_seconds
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=_chat_base_url(settings.openai_base_url),
            max_retries=0,
        )

    async def _complete(self, payload: str) -> str | None:
        response = await self.client.chat.completions.create(
            model=self.model,
            temperature=0.2,
            max_tokens=900,
            response_format={"type": "json_object"},
            messages=[
                {
                    "role": "system",
                    "content": f"{ENRICHMENT_SYSTEM_PROMPT}\nRespond with this shape:\n{ENRICHMENT_RESPONSE_SHAPE}",
                },
                {"role": "user", "content": payload},
            ],
        )
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def enrich(self, survey: SurveyInput, candidates: list[PageItem]) -> Enrichment | Degraded:
        payload = json.dumps(build_prompt_payload(survey, candidates), indent=2)
        logger.info(f"Calling {self.model} to enrich {len(candidates)} pages...")

        try:
            # wait_for cancels the in-flight request when the deadline passes
            content = await asyncio.wait_for(self._complete(payload), timeout=self.timeout)
        except asyncio.TimeoutError:
            return Degraded(f"timed out after {self.timeout}s")
        except OpenAIError as e:
            return Degraded(f"provider error: {e}")

        if not content:
            return Degraded("empty response")

        data = parse_llm_response(content)
        if data is None:
            return Degraded("unparsable response")

        return _enrichment_from_response(data)


def get_enricher(settings: Settings) -> OpenAIEnricher | None:
    """Return the configured enricher, or None when no LLM key is set."""
    if not settings.openai_api_key:
        return None
    return OpenAIEnricher(settings)


async def enrich_pages_and_questions(
    survey: SurveyInput,
    pages: list[PageItem],
    enricher: Enricher | None,
) -> EnrichmentResult:
    """Refine pages and questions with the enricher; never raises.

    Any degradation returns the original pages and questions with
    ``used=False``.
    """
    unchanged = EnrichmentResult(pages=pages, questions=split_list(survey.questions), used=False)
    if enricher is None or not pages:
        return unchanged

    candidates = select_candidate_pages(survey, pages)
    try:
        outcome = await enricher.enrich(survey, candidates)
    except Exception as e:
        outcome = Degraded(f"unexpected error: {e}")

    if isinstance(outcome, Degraded):
        logger.warning(f"Enrichment skipped: {outcome.reason}")
        return unchanged

    candidate_keys = {normalize_for_match(page.url) for page in candidates}
    updates = [u for u in outcome.page_updates if normalize_for_match(u.url) in candidate_keys]
    merged_pages = merge_pages(pages, updates) if updates else pages
    logger.info(
        f"Enrichment applied: {len(updates)} page updates, "
        f"{len(outcome.questions)} suggested questions"
    )
    return EnrichmentResult(
        pages=merged_pages,
        questions=merge_questions(survey.questions, outcome.questions),
        used=True,
    )
