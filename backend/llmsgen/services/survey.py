"""Survey input, page entries, and survey validation."""

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

NONE_TOKENS = {"none", "n/a", "na"}

_LIST_SEPARATOR = re.compile(r"[\n,]+")
_WHITESPACE = re.compile(r"\s+")


class SiteType(str, Enum):
    """Kind of site being described; selects the example link table."""

    DOCS = "docs"
    MARKETING = "marketing"
    SAAS = "saas"
    ECOMMERCE = "ecommerce"
    MARKETPLACE = "marketplace"
    SERVICES = "services"
    EDUCATION = "education"
    MEDIA = "media"


@dataclass(frozen=True)
class SurveyInput:
    """Answers to the survey. List-like fields are free text."""

    site_name: str = ""
    site_url: str = ""
    summary: str = ""
    categories: str = ""
    site_type: SiteType = SiteType.DOCS
    excludes: str = ""
    priority_pages: str = ""
    optional_pages: str = ""
    questions: str = ""


@dataclass
class PageItem:
    """A single discovered or synthesized page entry."""

    section: str
    title: str
    url: str
    description: str


def collapse_whitespace(value: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return _WHITESPACE.sub(" ", value or "").strip()


def is_none_value(value: str) -> bool:
    return value.strip().lower() in NONE_TOKENS


def split_list(value: str | None) -> list[str]:
    """Split free text on commas/newlines, dropping blanks and "none" tokens."""
    items = (item.strip() for item in _LIST_SEPARATOR.split(value or ""))
    return [item for item in items if item and not is_none_value(item)]


def parse_categories(value: str | None) -> list[str]:
    return split_list(value)


def _validate_site_url(value: str) -> str | None:
    """Return an error message for the homepage URL or None if valid."""
    if not value:
        return "Enter your homepage URL."
    try:
        parsed = urlparse(value)
    except ValueError:
        return "Enter a valid URL starting with http or https."
    if not parsed.scheme or not parsed.netloc:
        return "Enter a valid URL starting with http or https."
    if parsed.scheme not in ("http", "https"):
        return "Use an http or https URL."
    return None


def _has_unusable_list(value: str) -> bool:
    """True for non-blank text that yields no entries and is not a "none" token."""
    return bool(collapse_whitespace(value)) and not split_list(value) and not is_none_value(value)


def validate_survey(survey: SurveyInput) -> dict[str, str]:
    """Validate survey answers.

    Returns:
        Mapping of field name to a short message. Empty when valid.
    """
    errors: dict[str, str] = {}

    if not collapse_whitespace(survey.site_name):
        errors["site_name"] = "Enter a project or brand name."

    url_error = _validate_site_url(collapse_whitespace(survey.site_url))
    if url_error:
        errors["site_url"] = url_error

    if len(collapse_whitespace(survey.summary)) < 20:
        errors["summary"] = "Provide a short, factual sentence (20+ characters)."

    if not parse_categories(survey.categories):
        errors["categories"] = "Add at least one section."

    priority_count = len(split_list(survey.priority_pages))
    if priority_count < 3 or priority_count > 8:
        errors["priority_pages"] = "Add 3-8 priority URLs."

    if _has_unusable_list(survey.optional_pages):
        errors["optional_pages"] = "Add at least one optional URL or leave it blank."

    if not split_list(survey.questions):
        errors["questions"] = "Add at least one question."

    if _has_unusable_list(survey.excludes):
        errors["excludes"] = "Add at least one exclusion or leave it blank."

    return errors
