"""Tests for survey list parsing and validation."""

from dataclasses import replace

import pytest

from llmsgen.services.survey import SiteType, SurveyInput, split_list, validate_survey

VALID = SurveyInput(
    site_name="Atlas",
    site_url="https://atlas.test",
    summary="A clear description that is longer than twenty characters.",
    categories="Docs",
    site_type=SiteType.DOCS,
    priority_pages="/pricing, /docs, /docs/getting-started",
    questions="pricing, setup",
)


class TestSplitList:
    def test_commas_and_newlines(self):
        assert split_list("a, b\nc,,\n d ") == ["a", "b", "c", "d"]

    def test_drops_none_tokens(self):
        assert split_list("None, n/a, NA, real") == ["real"]

    def test_blank_input(self):
        assert split_list("") == []
        assert split_list(None) == []


class TestValidateSurvey:
    def test_valid_survey_has_no_errors(self):
        assert validate_survey(VALID) == {}

    def test_missing_name(self):
        errors = validate_survey(replace(VALID, site_name="   "))
        assert errors == {"site_name": "Enter a project or brand name."}

    @pytest.mark.parametrize("url,message", [
        ("", "Enter your homepage URL."),
        ("atlas.test", "Enter a valid URL starting with http or https."),
        ("ftp://atlas.test", "Use an http or https URL."),
    ])
    def test_bad_urls(self, url, message):
        assert validate_survey(replace(VALID, site_url=url))["site_url"] == message

    def test_short_summary(self):
        errors = validate_survey(replace(VALID, summary="Too short"))
        assert "summary" in errors

    def test_summary_whitespace_is_collapsed_before_counting(self):
        errors = validate_survey(replace(VALID, summary="a     b" + " " * 30))
        assert "summary" in errors

    def test_categories_required(self):
        assert "categories" in validate_survey(replace(VALID, categories="none"))

    @pytest.mark.parametrize("pages", ["/a, /b", "/1,/2,/3,/4,/5,/6,/7,/8,/9"])
    def test_priority_count_bounds(self, pages):
        errors = validate_survey(replace(VALID, priority_pages=pages))
        assert errors["priority_pages"] == "Add 3-8 priority URLs."

    def test_priority_count_accepts_eight(self):
        pages = ",".join(f"/p{i}" for i in range(8))
        assert validate_survey(replace(VALID, priority_pages=pages)) == {}

    def test_questions_required(self):
        assert "questions" in validate_survey(replace(VALID, questions=""))

    def test_optional_and_excludes_accept_blank_or_none(self):
        assert validate_survey(replace(VALID, optional_pages="", excludes="none")) == {}

    def test_optional_with_only_separators_is_rejected(self):
        errors = validate_survey(replace(VALID, optional_pages=" , ,\n"))
        assert errors["optional_pages"] == "Add at least one optional URL or leave it blank."

    def test_excludes_with_only_separators_is_rejected(self):
        errors = validate_survey(replace(VALID, excludes=",,"))
        assert errors["excludes"] == "Add at least one exclusion or leave it blank."

    def test_collects_every_error(self):
        errors = validate_survey(SurveyInput())
        assert set(errors) == {"site_name", "site_url", "summary", "categories", "priority_pages", "questions"}
