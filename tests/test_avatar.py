"""Tests for avatar extraction and validation."""
from __future__ import annotations

import pytest

from list_quality.avatar import AvatarExtractor, derive_name, extract_avatar, validate_avatar
from list_quality.errors import ValidationError
from list_quality.models import AvatarSpec, EmployeeRange, Thresholds


def valid_spec(**overrides) -> AvatarSpec:
    spec = AvatarSpec(name="Wealth founders", industries=["Financial Services"], roles_primary=["Founder"])
    for key, value in overrides.items():
        setattr(spec, key, value)
    return spec


def test_free_text_extracts_size_revenue_and_intent() -> None:
    spec = extract_avatar("US wealth managers, 50-200 employees, revenue $10m+, hiring SDRs")

    assert spec.employee_range == EmployeeRange(min=50, max=200)
    assert spec.revenue_min_usd == 10_000_000
    assert spec.intent_signals == ["Hiring since Aug 2025"]
    assert spec.geography == ["United States"]
    assert spec.industries == ["Financial Services"]


def test_revenue_before_keyword_and_thousands() -> None:
    assert extract_avatar("Agencies with $500k+ revenue").revenue_min_usd == 500_000
    assert extract_avatar("Firms doing $5m revenue").revenue_min_usd == 5_000_000


def test_explicit_employee_range_beats_size_words() -> None:
    spec = extract_avatar("Small agencies with 10-40 employees")

    assert spec.employee_range == EmployeeRange(min=10, max=40)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("SaaS startups", EmployeeRange(min=1, max=50)),
        ("mid-size clinics", EmployeeRange(min=51, max=200)),
        ("Enterprise banks", EmployeeRange(min=201, max=None)),
        ("Dentists", EmployeeRange()),
    ],
)
def test_size_buckets(text: str, expected: EmployeeRange) -> None:
    assert extract_avatar(text).employee_range == expected


def test_roles_geography_and_tech() -> None:
    spec = extract_avatar(
        "Founders and CEOs of fintech companies in NYC and New York state. VPs and directors using HubSpot or Salesforce."
    )

    assert spec.roles_primary == ["Founder", "CEO"]
    assert spec.roles_secondary == ["VP", "Director"]
    assert spec.geography == ["New York"]
    assert spec.industries == ["Technology"]
    assert spec.tech_signals == ["Hubspot", "Salesforce"]


def test_keywords_match_inflected_words() -> None:
    spec = extract_avatar("Technology and pharmaceutical companies, biotechnology directorships")

    assert spec.industries == ["Technology", "Healthcare"]
    assert spec.roles_secondary == ["Director"]


def test_short_keywords_need_whole_words() -> None:
    spec = extract_avatar("Businesses using said tools, headquartered in Ukraine")

    assert spec.geography == []
    assert spec.industries == []
    assert spec.roles_secondary == []


def test_unmatched_text_leaves_categories_empty() -> None:
    spec = extract_avatar("Friendly people")

    assert spec.name == "Friendly people"
    assert spec.geography == []
    assert spec.industries == []
    assert spec.roles_primary == []
    assert spec.revenue_min_usd is None


def test_derive_name() -> None:
    assert derive_name("Boston founders. More detail here.") == "Boston founders"
    assert derive_name(". nothing first") == "Custom Avatar"
    long_name = derive_name("x" * 80)
    assert len(long_name) == 50
    assert long_name.endswith("...")


def test_validation_names_missing_fields() -> None:
    with pytest.raises(ValidationError, match="name") as excinfo:
        validate_avatar(valid_spec(name=""))
    assert excinfo.value.field == "name"

    with pytest.raises(ValidationError, match="role") as excinfo:
        validate_avatar(valid_spec(roles_primary=[]))
    assert excinfo.value.field == "roles_primary"

    with pytest.raises(ValidationError) as excinfo:
        validate_avatar(valid_spec(industries=[], geography=[]))
    assert excinfo.value.field == "geography"

    with pytest.raises(ValidationError) as excinfo:
        validate_avatar(valid_spec(thresholds=Thresholds(accept_min=0.4, review_min=0.6)))
    assert excinfo.value.field == "thresholds"


def test_geography_alone_is_enough() -> None:
    assert validate_avatar(valid_spec(industries=[], geography=["Boston"])).geography == ["Boston"]


def test_extractor_form_mode_accepts_wire_mapping() -> None:
    spec = AvatarExtractor().from_form(
        {
            "name": "Boston owners",
            "geo": ["Boston"],
            "roles_primary": ["Owner"],
            "employee_range": {"min": 5, "max": 50},
            "company_revenue_usd": {"min": 1000000, "max": None},
            "thresholds": {"accept_min": 0.8, "review_min": 0.6},
        }
    )

    assert spec.geography == ["Boston"]
    assert spec.employee_range == EmployeeRange(min=5, max=50)
    assert spec.revenue_min_usd == 1_000_000
    assert spec.exclude_title_substrings == ["Intern", "Assistant", "Recruiter", "Student"]
    assert spec.to_payload()["thresholds"] == {"accept_min": 0.8, "review_min": 0.6}


@pytest.mark.parametrize(
    "overrides, field_name",
    [
        ({"employee_range": {"min": "ten", "max": 50}}, "employee_range"),
        ({"company_revenue_usd": {"min": "lots"}}, "company_revenue_usd"),
        ({"thresholds": {"accept_min": "high", "review_min": 0.5}}, "thresholds"),
        ({"weighting": {"role": None}}, "weighting"),
    ],
)
def test_form_numbers_that_do_not_parse_name_the_field(overrides: dict, field_name: str) -> None:
    form = {"name": "Boston owners", "geo": ["Boston"], "roles_primary": ["Owner"], **overrides}

    with pytest.raises(ValidationError) as excinfo:
        AvatarExtractor().from_form(form)

    assert excinfo.value.field == field_name


def test_extractor_modes_are_exclusive() -> None:
    extractor = AvatarExtractor()

    with pytest.raises(ValidationError):
        extractor.resolve()
    with pytest.raises(ValidationError):
        extractor.resolve(form=valid_spec(), description="Founders in Boston")
    with pytest.raises(ValidationError) as excinfo:
        extractor.from_text("   ")
    assert excinfo.value.field == "description"


def test_resolve_validates_extracted_text() -> None:
    spec = AvatarExtractor().resolve(description="Founders of SaaS startups in Austin")

    assert spec.roles_primary == ["Founder"]
    assert spec.geography == ["Austin"]
    assert spec.industries == ["Technology"]

    with pytest.raises(ValidationError) as excinfo:
        AvatarExtractor().resolve(description="SaaS startups in Austin")
    assert excinfo.value.field == "roles_primary"
