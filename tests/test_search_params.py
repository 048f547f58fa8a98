import pytest

from leadgen_gateway.errors import ValidationError
from leadgen_gateway.services.search_params import applied_filters, build_search_params


def test_defaults_page_and_reveal_info() -> None:
    params = build_search_params({"job_title": "CEO", "company": "Microsoft"})
    assert params == {"job_title": "CEO", "company": "Microsoft", "page": 1, "reveal_info": False}


def test_explicit_page_and_reveal_info_are_kept() -> None:
    params = build_search_params({"keyword": "ml", "page": 3, "reveal_info": True})
    assert params["page"] == 3
    assert params["reveal_info"] is True


@pytest.mark.parametrize(
    "filters",
    [
        {},
        {"page": 2, "reveal_info": True},
        {"name": "", "job_title": [], "company": None},
        {"current_titles_only": True, "exclude_companies": ["Acme"], "data_types": ["phone"]},
        {"enable_quality_verification": True},
    ],
)
def test_rejects_filters_without_a_discriminating_field(filters) -> None:
    with pytest.raises(ValidationError) as excinfo:
        build_search_params(filters)
    assert excinfo.value.details


@pytest.mark.parametrize("field", ["company_filter", "current_titles_only", "current_company_only"])
def test_match_experience_drops_conflicting_fields(field) -> None:
    value = "current" if field == "company_filter" else True
    params = build_search_params({"job_title": ["CTO"], "match_experience": "both", field: value})
    assert field not in params
    assert params["match_experience"] == "both"


def test_internal_toggles_never_reach_upstream() -> None:
    params = build_search_params(
        {"industry": "Software", "enable_quality_verification": True, "sort_by_quality": True}
    )
    assert "enable_quality_verification" not in params
    assert "sort_by_quality" not in params


def test_unknown_fields_are_ignored() -> None:
    params = build_search_params({"location": "Berlin", "favourite_colour": "blue"})
    assert "favourite_colour" not in params


def test_empty_values_are_pruned() -> None:
    params = build_search_params(
        {"skills": ["Go"], "education": [], "keyword": "", "domain": None, "current_company_only": False}
    )
    assert params == {"skills": ["Go"], "current_company_only": False, "page": 1, "reveal_info": False}


@pytest.mark.parametrize(
    "filters",
    [
        {"job_title": "CEO"},
        {"company": ["Acme"], "match_experience": "current", "company_filter": "both", "page": 4},
        {"company_size": ["1_10"], "reveal_info": True, "sort_by_quality": True, "skills": []},
    ],
)
def test_normalization_is_idempotent(filters) -> None:
    once = build_search_params(filters)
    assert build_search_params(once) == once


def test_applied_filters_echoes_headline_fields() -> None:
    echo = applied_filters({"job_title": ["CEO"], "keyword": ""})
    assert echo["job_title"] == ["CEO"]
    assert echo["keyword"] is None
    assert echo["company"] is None
