"""Turn loosely-typed search filters into the payload the people search accepts."""

import logging
from collections.abc import Mapping
from typing import Any

from ..errors import ValidationError
from .utils.constants import (
    DISCRIMINATING_FIELDS,
    INTERNAL_SEARCH_FIELDS,
    MATCH_EXPERIENCE_CONFLICTS,
    UPSTREAM_SEARCH_FIELDS,
)
from .utils.payload import is_empty

logger = logging.getLogger(__name__)

_RECOGNIZED_FIELDS = UPSTREAM_SEARCH_FIELDS + INTERNAL_SEARCH_FIELDS


def build_search_params(filters: Mapping[str, Any]) -> dict[str, Any]:
    """Return the canonical upstream payload for ``filters``.

    Raises ``ValidationError`` when no discriminating filter survives pruning.
    Applying it to its own output returns an equal mapping.
    """

    params: dict[str, Any] = {
        key: filters[key] for key in _RECOGNIZED_FIELDS if key in filters
    }
    if params.get("page") is None:
        params["page"] = 1
    if params.get("reveal_info") is None:
        params["reveal_info"] = False

    for key in INTERNAL_SEARCH_FIELDS:
        params.pop(key, None)

    if params.get("match_experience"):
        dropped = [key for key in MATCH_EXPERIENCE_CONFLICTS if key in params]
        for key in MATCH_EXPERIENCE_CONFLICTS:
            params.pop(key, None)
        if dropped:
            logger.info(
                "match_experience=%s set; dropped conflicting filters %s",
                params["match_experience"],
                dropped,
            )

    params = {key: value for key, value in params.items() if not is_empty(value)}

    if not any(key in params for key in DISCRIMINATING_FIELDS):
        raise ValidationError(
            "At least one search parameter is required",
            details=[
                "Provide at least one of: " + ", ".join(DISCRIMINATING_FIELDS),
            ],
        )
    return params


def applied_filters(filters: Mapping[str, Any]) -> dict[str, Any]:
    """Echo of the headline filters the caller asked for, for response metadata."""
    keys = (
        "job_title",
        "company",
        "location",
        "industry",
        "skills",
        "education",
        "years_of_experience",
        "company_size",
        "keyword",
    )
    return {key: filters.get(key) or None for key in keys}
