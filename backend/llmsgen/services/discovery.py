"""Page discovery: live crawl with a deterministic stub fallback."""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from llmsgen.services.survey import (
    PageItem,
    SurveyInput,
    collapse_whitespace,
    parse_categories,
    split_list,
)
from llmsgen.services.template_builder import (
    FALLBACK_SECTIONS,
    build_stub_pages,
    build_template,
    normalize_base_url,
    resolve_url,
    slugify,
)

logger = logging.getLogger(__name__)

DiscoveryMode = Literal["stub", "live"]

MAX_DESCRIPTION_CHARS = 160
MIN_PROSE_LINE_CHARS = 20
SUMMARY_FALLBACK = "Summary not available."


class Crawler(Protocol):
    async def crawl_website(self, start_url: str) -> list[dict[str, Any]]: ...


@dataclass
class DiscoveryResult:
    """Generated preview text plus the pages it was built from."""

    preview: str
    pages: list[PageItem] = field(default_factory=list)
    mode: DiscoveryMode = "stub"


def extract_description(markdown: str | None, fallback: str | None = None) -> str:
    """Pick a page description.

    Prefers the metadata description, then the first prose line of the
    markdown (not a heading or code fence, at least 20 characters).
    """
    clean_fallback = collapse_whitespace(fallback or "")
    if clean_fallback:
        return clean_fallback
    if not markdown:
        return SUMMARY_FALLBACK
    for line in (raw.strip() for raw in markdown.split("\n")):
        if line and not line.startswith("#") and not line.startswith("```") and len(line) >= MIN_PROSE_LINE_CHARS:
            return collapse_whitespace(line)[:MAX_DESCRIPTION_CHARS]
    return SUMMARY_FALLBACK


def guess_section(url: str, categories: list[str]) -> str:
    for category in categories:
        if slugify(category) in url:
            return category
    return categories[0] if categories else FALLBACK_SECTIONS[0]


def pages_from_crawl(survey: SurveyInput, raw_pages: list[dict[str, Any]]) -> list[PageItem]:
    """Map raw crawl results onto page entries, skipping excluded URLs."""
    base_url = normalize_base_url(survey.site_url)
    categories = parse_categories(survey.categories)
    excludes = split_list(survey.excludes)

    pages = []
    for raw in raw_pages:
        url = resolve_url(base_url, raw.get("url") or "")
        if not url:
            continue
        if any(exclude in url for exclude in excludes):
            logger.debug(f"Excluded crawled page: {url}")
            continue
        pages.append(PageItem(
            section=guess_section(url, categories),
            title=collapse_whitespace(raw.get("title") or url),
            url=url,
            description=extract_description(raw.get("markdown"), raw.get("description")),
        ))
    return pages


def _stub_result(survey: SurveyInput) -> DiscoveryResult:
    pages = build_stub_pages(survey)
    return DiscoveryResult(preview=build_template(survey, pages), pages=pages, mode="stub")


async def generate_llms(survey: SurveyInput, crawler: Crawler | None = None) -> DiscoveryResult:
    """Discover pages for a survey and build the llms.txt preview.

    Without a crawler the stub generator is used. Crawl failures of any kind
    also fall back to the stub path; the mode reports which path ran.
    """
    if crawler is None:
        return _stub_result(survey)

    try:
        raw_pages = await crawler.crawl_website(survey.site_url)
    except Exception as e:
        logger.warning(f"Crawl failed for {survey.site_url}, using stub pages: {e}")
        return _stub_result(survey)

    pages = pages_from_crawl(survey, raw_pages)
    logger.info(f"Live discovery produced {len(pages)} pages for {survey.site_url}")
    return DiscoveryResult(preview=build_template(survey, pages), pages=pages, mode="live")
