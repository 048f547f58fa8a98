from typing import Any


def normalize_profiles(raw: Any) -> list[dict[str, Any]]:
    """Collapse the upstream ``profiles`` field into a list.

    The search and decision-maker endpoints key profiles by their LinkedIn
    URL; enrichment endpoints sometimes already return a list. Either way each
    record leaves here with an explicit ``linkedin_url``.
    """

    if not raw:
        return []
    if isinstance(raw, dict):
        profiles = []
        for url, body in raw.items():
            record = dict(body) if isinstance(body, dict) else {}
            record["linkedin_url"] = url
            profiles.append(record)
        return profiles
    if isinstance(raw, list):
        return [dict(item) for item in raw if isinstance(item, dict)]
    return []


def first_profile(raw: Any) -> dict[str, Any]:
    if isinstance(raw, list):
        return dict(raw[0]) if raw and isinstance(raw[0], dict) else {}
    if isinstance(raw, dict):
        return dict(raw)
    return {}


def normalize_companies(raw: Any) -> dict[str, dict[str, Any]]:
    """``[{domain: company}, ...]`` (or a single mapping) -> ``{domain: company}``."""
    companies: dict[str, dict[str, Any]] = {}
    items = raw if isinstance(raw, list) else [raw]
    for item in items:
        if not isinstance(item, dict):
            continue
        for domain, company in item.items():
            if isinstance(company, dict):
                companies[domain.lower()] = company
    return companies


def parse_contact_status(data: Any, contact_type: str) -> tuple[bool, bool]:
    """Return ``(available, verified)`` from a free contact status probe."""
    profile = data.get("profile") if isinstance(data, dict) else None
    if not isinstance(profile, dict):
        return False, False
    field = "phone" if contact_type == "phone" else "email"
    available = bool(profile.get(field))
    verified = str(profile.get("email_status") or "").lower() == "verified"
    return available, verified
