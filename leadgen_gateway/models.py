from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .services.utils.constants import (
    COMPANY_SIZES,
    DATA_TYPES,
    EXPERIENCE_MATCH_MODES,
    EXPERIENCE_RANGES,
    MAX_BULK_PROFILES,
    REVEAL_TYPES,
)
from .services.utils.validation import is_valid_email, is_valid_linkedin_url


def _check_string_or_list(value: Any, max_items: int, max_length: int = 100) -> Any:
    if value is None:
        return value
    if isinstance(value, list):
        if not value or len(value) > max_items:
            raise ValueError(f"must contain 1-{max_items} items")
        if any(len(item) > max_length for item in value):
            raise ValueError(f"items must be strings with max {max_length} characters")
    elif len(value) > max_length:
        raise ValueError(f"must be a string with max {max_length} characters")
    return value


def _check_tokens(value: Any, allowed: tuple[str, ...]) -> Any:
    if value is None:
        return value
    items = value if isinstance(value, list) else [value]
    bad = [item for item in items if item not in allowed]
    if bad:
        raise ValueError(f"invalid values: {', '.join(bad)}")
    return value


class SearchRequest(BaseModel):
    # Unknown keys are dropped; the builder only sees recognized filters.
    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(default=None, max_length=100)
    job_title: str | list[str] | None = None
    exclude_job_titles: list[str] | None = None
    current_titles_only: bool | None = None
    include_related_job_titles: bool | None = None
    company: str | list[str] | None = None
    exclude_companies: list[str] | None = None
    company_filter: str | None = None
    current_company_only: bool | None = None
    match_experience: str | None = None
    domain: str | list[str] | None = None
    company_size: str | list[str] | None = None
    location: str | list[str] | None = None
    industry: str | list[str] | None = None
    skills: str | list[str] | None = None
    education: str | list[str] | None = None
    years_of_experience: str | list[str] | None = None
    years_in_current_role: str | list[str] | None = None
    keyword: str | None = Field(default=None, max_length=200)
    data_types: list[str] | None = None
    reveal_info: bool | None = None
    page: int | None = Field(default=None, ge=1)
    page_size: int | None = Field(default=None, ge=1, le=100)
    enable_quality_verification: bool | None = None
    sort_by_quality: bool | None = None

    @field_validator("job_title", "company", "location", "industry", "education", "domain", "skills")
    @classmethod
    def _limit_filter_lists(cls, value: Any) -> Any:
        return _check_string_or_list(value, max_items=50)

    @field_validator("exclude_job_titles", "exclude_companies")
    @classmethod
    def _limit_exclusions(cls, value: Any) -> Any:
        return _check_string_or_list(value, max_items=5)

    @field_validator("years_of_experience", "years_in_current_role")
    @classmethod
    def _experience_ranges(cls, value: Any) -> Any:
        return _check_tokens(value, EXPERIENCE_RANGES)

    @field_validator("company_size")
    @classmethod
    def _company_sizes(cls, value: Any) -> Any:
        return _check_tokens(value, COMPANY_SIZES)

    @field_validator("company_filter", "match_experience")
    @classmethod
    def _match_modes(cls, value: Any) -> Any:
        return _check_tokens(value, EXPERIENCE_MATCH_MODES)

    @field_validator("data_types")
    @classmethod
    def _data_types(cls, value: Any) -> Any:
        return _check_tokens(value, DATA_TYPES)


class RevealRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    linkedin_url: str
    reveal_types: list[str] = Field(default_factory=lambda: ["email"])

    @field_validator("linkedin_url")
    @classmethod
    def _linkedin_url(cls, value: str) -> str:
        if not is_valid_linkedin_url(value):
            raise ValueError("Invalid LinkedIn URL format. Expected: https://linkedin.com/in/username")
        return value

    @field_validator("reveal_types")
    @classmethod
    def _reveal_types(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("reveal_types array cannot be empty")
        return _check_tokens(value, REVEAL_TYPES)


class EmailRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str = Field(max_length=320)
    include_work_email: bool = False

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if not is_valid_email(value):
            raise ValueError("Invalid email format")
        return value


class BulkEnrichRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    linkedin_urls: list[str] = Field(min_length=1, max_length=MAX_BULK_PROFILES)
    include_phone: bool = False

    @field_validator("linkedin_urls")
    @classmethod
    def _urls(cls, value: list[str]) -> list[str]:
        bad = [url for url in value if not is_valid_linkedin_url(url)]
        if bad:
            raise ValueError(f"invalid LinkedIn URLs: {', '.join(bad[:5])}")
        return value


class CompanyInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    domain: str = ""
    size: int | str | None = None
    industry: str = ""

    @field_validator("name", "domain", "industry", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Profile(BaseModel):
    """Upstream person record; unknown upstream keys are kept as-is."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    full_name: str = ""
    title: str = ""
    headline: str = ""
    location: str = ""
    company: CompanyInfo | None = None
    email: list[str] = Field(default_factory=list)
    work_email: list[str] = Field(default_factory=list)
    personal_email: list[str] = Field(default_factory=list)
    phone: list[str] = Field(default_factory=list)
    linkedin_url: str = ""
    confidence_level: str | None = Field(default=None, alias="confidenceLevel")

    @field_validator("full_name", "title", "headline", "location", "linkedin_url", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("email", "work_email", "personal_email", "phone", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str)]
        return value

    @field_validator("company", mode="before")
    @classmethod
    def _company(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"name": value}
        return value or None


class ContactAvailability(BaseModel):
    personal_email: bool = False
    work_email: bool = False
    work_email_verified: bool = False
    phone: bool = False


class QualityScore(BaseModel):
    overall: int
    confidence: Literal["high", "medium", "low"]
    flags: list[str] = Field(default_factory=list)
    cost_recommended: bool = False


class ScoredProfile(BaseModel):
    profile: Profile
    quality: QualityScore
    contact_availability: ContactAvailability
