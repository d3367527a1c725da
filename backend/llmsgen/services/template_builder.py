"""Deterministic llms.txt template generation from survey answers.

Everything here is pure: the same survey and pages always produce the same
Markdown. Discovered pages (crawl or stub) are grouped into the survey's
sections with the user's priority pages first; when nothing was discovered
the per-site-type example table fills each section.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Sequence
from urllib.parse import unquote, urljoin, urlparse

from llmsgen.services.survey import (
    PageItem,
    SiteType,
    SurveyInput,
    collapse_whitespace,
    parse_categories,
    split_list,
)

DEFAULT_BASE_URL = "https://example.com"
DEFAULT_TITLE = "Your Project"
DEFAULT_SUMMARY = (
    "A factual, one sentence description of who this site helps and what it provides."
)
FALLBACK_SECTIONS = ["Core documentation", "API reference", "Guides"]

PRIORITY_DESCRIPTION = "User-prioritized page for AI answers."
OPTIONAL_DESCRIPTION = "Nice-to-have context that can be skipped."

MAX_PAGES_PER_SECTION = 6
MAX_QUESTIONS = 6
MAX_OPTIONAL = 6

_NON_SLUG = re.compile(r"[^a-z0-9]+")
_TITLE_SEPARATORS = re.compile(r"[-_]+")


@dataclass(frozen=True)
class ExampleLink:
    """Template for a synthesized page: ``{base}/{section-slug}/{suffix}``."""

    suffix: str
    title: str
    description: str


SITE_TYPE_EXAMPLES: dict[SiteType, tuple[ExampleLink, ...]] = {
    SiteType.DOCS: (
        ExampleLink("getting-started", "Getting started", "Install, configure, and ship your first project."),
        ExampleLink("guides", "Guides", "Step-by-step workflows and best practices."),
        ExampleLink("api", "API reference", "Endpoints, parameters, and response shapes."),
    ),
    SiteType.MARKETING: (
        ExampleLink("features", "Product capabilities", "What the product does and how it works."),
        ExampleLink("pricing", "Pricing", "Plans, limits, and billing details."),
        ExampleLink("case-studies", "Case studies", "Real outcomes and customer proof."),
    ),
    SiteType.SAAS: (
        ExampleLink("product", "Product overview", "Core capabilities and workflows."),
        ExampleLink("pricing", "Pricing", "Plans, limits, and billing details."),
        ExampleLink("security", "Security", "Compliance, data handling, and trust."),
    ),
    SiteType.ECOMMERCE: (
        ExampleLink("collections", "Collections", "Top categories and product groups."),
        ExampleLink("shipping-returns", "Shipping & returns", "Delivery times, costs, and policies."),
        ExampleLink("support", "Customer support", "Help center and contact options."),
    ),
    SiteType.MARKETPLACE: (
        ExampleLink("browse", "Browse listings", "How buyers discover offerings."),
        ExampleLink("seller-guidelines", "Seller guidelines", "Requirements and onboarding rules."),
        ExampleLink("fees", "Fees", "Marketplace pricing and payouts."),
    ),
    SiteType.SERVICES: (
        ExampleLink("services", "Service menu", "What you offer and scope."),
        ExampleLink("pricing", "Pricing", "Packages and estimates."),
        ExampleLink("contact", "Contact", "How to book or request a quote."),
    ),
    SiteType.EDUCATION: (
        ExampleLink("programs", "Programs", "Courses, tracks, and outcomes."),
        ExampleLink("admissions", "Admissions", "Requirements, deadlines, and steps."),
        ExampleLink("tuition", "Tuition & aid", "Costs, scholarships, and payment options."),
    ),
    SiteType.MEDIA: (
        ExampleLink("news", "Newsroom", "Latest announcements and updates."),
        ExampleLink("press", "Press kit", "Brand assets and media contacts."),
        ExampleLink("newsletter", "Newsletter", "Subscribe and past issues."),
    ),
}


def slugify(value: str) -> str:
    return _NON_SLUG.sub("-", value.lower()).strip("-")


def normalize_base_url(value: str) -> str:
    """Trim a site URL and drop trailing slashes, defaulting to a placeholder."""
    trimmed = (value or "").strip()
    if not trimmed:
        return DEFAULT_BASE_URL
    return trimmed.rstrip("/")


def normalize_for_match(url: str) -> str:
    return url.rstrip("/").lower()


def join_url(base: str, *parts: str) -> str:
    cleaned = [base.rstrip("/"), *parts]
    return "/".join(part.strip("/") for part in cleaned if part.strip("/"))


def resolve_url(base_url: str, value: str) -> str:
    """Resolve an absolute URL or root-relative path against the site URL.

    Entries that cannot be resolved are returned as the trimmed literal.
    """
    trimmed = value.strip()
    if not trimmed:
        return ""
    try:
        parsed = urlparse(trimmed)
        if parsed.scheme and parsed.netloc:
            return trimmed.rstrip("/")
        base = urlparse(base_url)
        if not (base.scheme and base.netloc):
            return trimmed
        return urljoin(base_url.rstrip("/") + "/", trimmed).rstrip("/")
    except ValueError:
        return trimmed


def parse_url_list(value: str | None, base_url: str) -> list[str]:
    """Resolve each entry and de-duplicate by normalized form, keeping order."""
    seen: set[str] = set()
    urls = []
    for entry in split_list(value):
        url = resolve_url(base_url, entry)
        key = normalize_for_match(url)
        if not key or key in seen:
            continue
        seen.add(key)
        urls.append(url)
    return urls


def title_from_url(url: str) -> str:
    """Derive a readable title from the last path segment of a URL."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not (parsed.scheme and parsed.netloc):
        return url
    segments = [segment for segment in parsed.path.rstrip("/").split("/") if segment]
    if not segments:
        return parsed.hostname or url
    spaced = _TITLE_SEPARATORS.sub(" ", unquote(segments[-1]))
    if not spaced:
        return parsed.hostname or url
    return spaced[0].upper() + spaced[1:]


def guess_section_from_url(url: str, sections: Sequence[str]) -> str:
    lowered = url.lower()
    for section in sections:
        if slugify(section) in lowered:
            return section
    return sections[0] if sections else FALLBACK_SECTIONS[0]


def resolve_sections(survey: SurveyInput) -> list[str]:
    return parse_categories(survey.categories) or list(FALLBACK_SECTIONS)


def select_examples(site_type: SiteType | str, index: int) -> list[ExampleLink]:
    options = SITE_TYPE_EXAMPLES.get(site_type, SITE_TYPE_EXAMPLES[SiteType.MARKETING])
    return [options[index % len(options)], options[(index + 1) % len(options)]]


def build_stub_pages(survey: SurveyInput) -> list[PageItem]:
    """Synthesize two example pages per section from the site-type table."""
    base_url = normalize_base_url(survey.site_url)
    pages = []
    for index, section in enumerate(resolve_sections(survey)):
        section_slug = slugify(section)
        for example in select_examples(survey.site_type, index):
            pages.append(PageItem(
                section=section,
                title=example.title,
                url=join_url(base_url, section_slug, example.suffix),
                description=example.description,
            ))
    return pages


def map_pages_to_sections(
    pages: Iterable[PageItem],
    sections: Sequence[str],
) -> dict[str, list[PageItem]]:
    """Group pages by section.

    A page goes to the section named by its ``section`` field, else the first
    section whose slug appears in its URL, else the first section.
    """
    grouped: dict[str, list[PageItem]] = {section: [] for section in sections}
    if not sections:
        return grouped

    for page in pages:
        matched = next((s for s in sections if page.section == s), None)
        if matched is None:
            matched = next((s for s in sections if slugify(s) in page.url), sections[0])
        grouped[matched].append(page)

    return grouped


def _format_page(page: PageItem) -> str:
    return f"- [{page.title}]({page.url}): {page.description}"


def _synthesize(url: str, sections: Sequence[str], description: str) -> PageItem:
    return PageItem(
        section=guess_section_from_url(url, sections),
        title=title_from_url(url),
        url=url,
        description=description,
    )


def build_template(
    survey: SurveyInput,
    pages: Sequence[PageItem] = (),
    questions: Sequence[str] | None = None,
) -> str:
    """Render the llms.txt Markdown for a survey and optional discovered pages.

    ``questions`` replaces the survey's free-text questions when given, so
    already-split entries (which may contain commas) are kept whole.
    """
    title = collapse_whitespace(survey.site_name) or DEFAULT_TITLE
    summary = collapse_whitespace(survey.summary) or DEFAULT_SUMMARY
    base_url = normalize_base_url(survey.site_url)
    sections = resolve_sections(survey)

    priority_urls = parse_url_list(survey.priority_pages, base_url)
    priority_set = {normalize_for_match(url) for url in priority_urls}
    optional_urls = [
        url for url in parse_url_list(survey.optional_pages, base_url)
        if normalize_for_match(url) not in priority_set
    ]
    optional_set = {normalize_for_match(url) for url in optional_urls}
    questions = list(questions) if questions is not None else split_list(survey.questions)

    pages_by_url = {normalize_for_match(page.url): page for page in pages}
    priority_items = [
        pages_by_url.get(normalize_for_match(url))
        or _synthesize(url, sections, PRIORITY_DESCRIPTION)
        for url in priority_urls
    ]
    optional_items = [
        pages_by_url.get(normalize_for_match(url))
        or _synthesize(url, sections, OPTIONAL_DESCRIPTION)
        for url in optional_urls
    ]

    lines = [f"# {title}", "", f"> {summary}", ""]

    if questions:
        lines.append("Key questions this site should answer:")
        for question in questions[:MAX_QUESTIONS]:
            clean = collapse_whitespace(question)
            lines.append(f"- {clean if clean.endswith('?') else clean + '?'}")
        lines.append("")

    if pages or priority_items:
        grouped = map_pages_to_sections([*pages, *priority_items], sections)
        for section in sections:
            lines.append(f"## {section}")
            section_pages = grouped.get(section, [])
            section_by_url = {normalize_for_match(page.url): page for page in section_pages}
            priority_for_section = [
                section_by_url[key]
                for key in (normalize_for_match(url) for url in priority_urls)
                if key in section_by_url
            ]
            other_pages = [
                page for page in section_pages
                if normalize_for_match(page.url) not in priority_set
                and normalize_for_match(page.url) not in optional_set
            ]
            for page in [*priority_for_section, *other_pages][:MAX_PAGES_PER_SECTION]:
                lines.append(_format_page(page))
            lines.append("")
    else:
        for index, section in enumerate(sections):
            section_slug = slugify(section)
            lines.append(f"## {section}")
            for example in select_examples(survey.site_type, index):
                url = join_url(base_url, section_slug, example.suffix)
                lines.append(f"- [{example.title}]({url}): {example.description}")
            lines.append("")

    if optional_items:
        lines.append("## Optional")
        for page in optional_items[:MAX_OPTIONAL]:
            lines.append(_format_page(page))
        lines.append("")

    return "\n".join(lines)
