from typing import Any

from fastapi import APIRouter, Depends

from ...models import SearchRequest
from ...services.gateway_service import GatewayService
from ...services.utils.constants import (
    COMPANY_SIZES,
    DATA_TYPES,
    EXPERIENCE_MATCH_MODES,
    EXPERIENCE_RANGES,
)
from ..dependencies import get_gateway, get_organization_id
from ..responses import success

router = APIRouter(prefix="/search", tags=["search"])

_LIST_FILTERS = {
    "job_title": ["CEO", "Vice President", "Software Engineer"],
    "company": ["Microsoft", "Google"],
    "location": ["New York", "San Francisco", "Remote"],
    "industry": ["Computer Software", "Financial Services"],
    "education": ["Stanford", "MBA"],
    "skills": ["Python", "Project Management"],
    "domain": ["microsoft.com", "google.com"],
}

FILTER_EXAMPLES = {
    "tech_executives": {
        "job_title": ["CEO", "CTO", "VP Engineering"],
        "company": ["Microsoft", "Google", "Apple"],
        "company_size": ["1001_5000", "5001_10000"],
        "enable_quality_verification": True,
    },
    "startup_founders": {
        "job_title": ["Founder", "Co-Founder"],
        "company_size": ["1_10", "11_50"],
        "keyword": "startup",
        "enable_quality_verification": True,
        "sort_by_quality": True,
    },
}


def filter_catalogue() -> dict[str, Any]:
    filters: dict[str, Any] = {
        "name": {"type": "string", "max_length": 100},
        "keyword": {"type": "string", "max_length": 200},
    }
    for name, examples in _LIST_FILTERS.items():
        filters[name] = {"type": "string | array", "max_items": 50, "examples": examples}
    for name in ("exclude_job_titles", "exclude_companies"):
        filters[name] = {"type": "array", "max_items": 5}
    for name in ("years_of_experience", "years_in_current_role"):
        filters[name] = {"type": "string | array", "options": list(EXPERIENCE_RANGES)}
    filters["company_size"] = {"type": "string | array", "options": list(COMPANY_SIZES)}
    for name in ("company_filter", "match_experience"):
        filters[name] = {"type": "string", "options": list(EXPERIENCE_MATCH_MODES)}
    filters["match_experience"]["note"] = (
        "overrides company_filter, current_titles_only and current_company_only"
    )
    for name in ("current_titles_only", "include_related_job_titles", "current_company_only"):
        filters[name] = {"type": "boolean"}
    filters["data_types"] = {"type": "array", "options": list(DATA_TYPES)}
    filters["reveal_info"] = {"type": "boolean", "default": False, "note": "consumes credits"}
    filters["page"] = {"type": "integer", "default": 1}
    filters["page_size"] = {"type": "integer", "min": 1, "max": 100}
    filters["enable_quality_verification"] = {"type": "boolean", "default": False}
    filters["sort_by_quality"] = {"type": "boolean", "default": False}
    return {"filters": filters, "examples": FILTER_EXAMPLES}


@router.post("")
async def search_people(
    payload: SearchRequest,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    result = await gateway.search_people(payload.model_dump(exclude_none=True), organization_id)
    return success(result)


@router.get("/filters")
async def search_filters() -> dict[str, Any]:
    return success(filter_catalogue())
