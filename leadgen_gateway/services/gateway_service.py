import logging
import math
import time
import uuid
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from ..config import Settings
from ..errors import GatewayError, NotFound, RateLimitExceeded, StoreError
from ..logging_utils import append_ndjson, utc_now_iso
from .cache import ResponseCache, cache_key
from .contactout_client import ContactOutClient
from .quality import QualityScorer, scoring_view
from .rate_limiter import RateLimiter
from .response_parsing import first_profile, normalize_companies
from .search_params import applied_filters, build_search_params
from .store import KeyValueStore, build_store
from .utils.constants import (
    BULK_ENRICH_PATH,
    CONTACT_STATUS_PATHS,
    DECISION_MAKERS_PATH,
    DEFAULT_PAGE_SIZE,
    DOMAIN_ENRICH_PATH,
    EMAIL_ENRICH_PATH,
    EMAIL_VERIFY_PATH,
    LINKEDIN_ENRICH_PATH,
    PEOPLE_SEARCH_PATH,
    USAGE_STATS_PATH,
)

logger = logging.getLogger(__name__)


def _unique(values: list[Any]) -> list[Any]:
    return list(dict.fromkeys(v for v in values if v))


def _pagination(metadata: Mapping[str, Any], page: int) -> dict[str, Any]:
    total = int(metadata.get("total_results") or 0)
    page_size = int(metadata.get("page_size") or DEFAULT_PAGE_SIZE)
    return {
        "total_results": total,
        "page": int(metadata.get("page") or page),
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if page_size else 0,
    }


class GatewayService:
    """Everything a request handler needs, built once per process."""

    def __init__(
        self,
        settings: Settings,
        client: ContactOutClient,
        store: KeyValueStore,
        *,
        limiter: RateLimiter | None = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.store = store
        self.cache = ResponseCache(store)
        self.limiter = limiter or RateLimiter(
            store,
            settings.rate_limits,
            fail_closed=settings.rate_limit_fail_closed,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        store: KeyValueStore | None = None,
    ) -> "GatewayService":
        client = ContactOutClient(
            settings.api_key,
            base_url=settings.base_url,
            timeout_seconds=settings.upstream_timeout,
            transport=transport,
        )
        return cls(settings, client, store or build_store(settings.redis_url))

    def _audit(self, event: str, organization_id: str, **fields: Any) -> None:
        append_ndjson(
            self.settings.audit_log_path,
            {
                "ts": utc_now_iso(),
                "request_id": uuid.uuid4().hex,
                "event": event,
                "organization_id": organization_id,
                **fields,
            },
        )

    async def _cached_call(
        self,
        key: str,
        organization_id: str,
        path: str,
        call: Callable[[], Awaitable[Any]],
    ) -> tuple[Any, bool]:
        cached = await self.cache.get(key)
        if cached is not None:
            logger.info("Cache hit %s", key)
            return cached, True
        await self.limiter.enforce(organization_id, path)
        result = await call()
        await self.cache.set(key, result)
        return result, False

    async def _probe(self, linkedin_url: str, contact_type: str, organization_id: str) -> dict[str, Any]:
        await self.limiter.enforce(organization_id, CONTACT_STATUS_PATHS[contact_type])
        return await self.client.contact_status(linkedin_url, contact_type)

    def scorer_for(self, organization_id: str, pause_seconds: float | None = None) -> QualityScorer:
        """Quality scorer whose free probes count against ``organization_id``."""
        return QualityScorer(
            lambda url, kind: self._probe(url, kind, organization_id),
            pause_seconds=self.settings.quality_batch_pause if pause_seconds is None else pause_seconds,
        )

    async def _annotate_quality(
        self, records: list[dict[str, Any]], organization_id: str, *, rank: bool
    ) -> list[dict[str, Any]]:
        """Attach ``quality`` and ``contact_availability`` to each upstream record as-is."""
        scored = await self.scorer_for(organization_id).score_all(
            [scoring_view(record) for record in records], rank=False
        )
        annotated = [
            {
                **record,
                "quality": item.quality.model_dump(),
                "contact_availability": item.contact_availability.model_dump(),
            }
            for record, item in zip(records, scored)
        ]
        if rank:
            annotated.sort(key=lambda record: record["quality"]["overall"], reverse=True)
        return annotated

    async def search_people(self, filters: Mapping[str, Any], organization_id: str) -> dict[str, Any]:
        started = time.perf_counter()
        params = build_search_params(filters)
        key = cache_key("search", params)

        try:
            result, cached = await self._cached_call(
                key,
                organization_id,
                PEOPLE_SEARCH_PATH,
                lambda: self.client.search_people(params),
            )
        except RateLimitExceeded as exc:
            if not self.settings.degraded_mode:
                raise
            logger.warning("Search admission refused for %s; serving degraded result", organization_id)
            self._audit("search", organization_id, mode="degraded", params=params)
            return {
                "mode": "degraded",
                "retry_after": exc.retry_after,
                "metadata": _pagination({}, params["page"]),
                "filters_applied": applied_filters(filters),
                "profiles": [],
                "credits_used": 0,
            }

        profiles: list[dict[str, Any]] = list(result.get("profiles") or [])
        if filters.get("enable_quality_verification") and profiles:
            profiles = await self._annotate_quality(
                profiles, organization_id, rank=bool(filters.get("sort_by_quality"))
            )

        payload = {
            "mode": "cached" if cached else "live",
            "metadata": _pagination(result.get("metadata") or {}, params["page"]),
            "filters_applied": applied_filters(filters),
            "profiles": profiles,
            "credits_used": len(profiles) if params.get("reveal_info") and not cached else 0,
        }
        self._audit(
            "search",
            organization_id,
            mode=payload["mode"],
            params=params,
            profiles_returned=len(profiles),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        logger.info(
            "Search for %s returned %d profiles (%s)",
            organization_id,
            len(profiles),
            payload["mode"],
        )
        return payload

    async def decision_makers(
        self, domain: str, reveal_info: bool, organization_id: str
    ) -> dict[str, Any]:
        await self.limiter.enforce(organization_id, DECISION_MAKERS_PATH)
        result = await self.client.decision_makers({"domain": domain, "reveal_info": reveal_info})
        profiles = result["profiles"]
        return {
            "company_domain": domain,
            "decision_makers": profiles,
            "total_found": len(profiles),
            "total_results": int(result["metadata"].get("total_results") or len(profiles)),
            "credits_used": len(profiles) if reveal_info else 0,
        }

    async def company_employees(self, company_name: str, organization_id: str) -> dict[str, Any]:
        """Free decision-maker lookup by company name; never reveals contact data."""
        await self.limiter.enforce(organization_id, DECISION_MAKERS_PATH)
        result = await self.client.decision_makers({"name": company_name, "reveal_info": False})
        employees = [
            {
                "name": profile.get("full_name"),
                "job_title": profile.get("title"),
                "headline": profile.get("headline"),
                "linkedin_url": profile.get("linkedin_url"),
                "location": profile.get("location"),
                "company": profile.get("company"),
            }
            for profile in result["profiles"]
        ]
        logger.info("Company employees for %r: %d returned", company_name, len(employees))
        return {
            "company_name": company_name,
            "total_results": int(result["metadata"].get("total_results") or 0),
            "employees_returned": len(employees),
            "profiles": employees,
            "statistics": {
                "total_employees": len(employees),
                "with_titles": sum(1 for e in employees if e["job_title"]),
                "with_locations": sum(1 for e in employees if e["location"]),
            },
            "credits_used": 0,
        }

    async def reveal_contacts(
        self, linkedin_url: str, reveal_types: list[str], organization_id: str
    ) -> dict[str, Any]:
        key = cache_key("linkedin", {"profile": linkedin_url, "profile_only": False})
        result, cached = await self._cached_call(
            key,
            organization_id,
            LINKEDIN_ENRICH_PATH,
            lambda: self.client.enrich_linkedin(linkedin_url, profile_only=False),
        )
        profile = first_profile(result.get("profile"))
        company = profile.get("company") if isinstance(profile.get("company"), dict) else {}

        contact: dict[str, Any] = {
            "name": profile.get("full_name"),
            "job_title": profile.get("title"),
            "company": company.get("name"),
            "location": profile.get("location"),
            "linkedin_url": linkedin_url,
        }
        credits_used = 0
        if "email" in reveal_types:
            emails = _unique(
                list(profile.get("email") or [])
                + list(profile.get("work_email") or [])
                + list(profile.get("personal_email") or [])
            )
            contact["emails"] = emails
            credits_used += 1 if emails else 0
        if "phone" in reveal_types:
            phones = _unique(list(profile.get("phone") or []))
            contact["phones"] = phones
            credits_used += 1 if phones else 0

        contact["reveal_success"] = credits_used > 0
        contact["credits_used"] = 0 if cached else credits_used
        self._audit(
            "reveal",
            organization_id,
            linkedin_url=linkedin_url,
            reveal_types=reveal_types,
            cached=cached,
            credits_used=contact["credits_used"],
        )
        return contact

    async def enrich_email(
        self, email: str, include_work_email: bool, organization_id: str
    ) -> dict[str, Any]:
        key = cache_key("email", {"email": email.lower(), "include_work_email": include_work_email})
        result, _ = await self._cached_call(
            key,
            organization_id,
            EMAIL_ENRICH_PATH,
            lambda: self.client.enrich_email(email, include_work_email=include_work_email),
        )
        return {"email": email, "profile": first_profile(result.get("profile"))}

    async def company_info(self, domain: str, organization_id: str) -> dict[str, Any]:
        domain = domain.lower()
        key = cache_key("company", {"domains": [domain]})
        cached = await self.cache.get(key)
        if cached is None:
            await self.limiter.enforce(organization_id, DOMAIN_ENRICH_PATH)
            result = await self.client.enrich_domains([domain])
            company = normalize_companies(result.get("companies")).get(domain)
            if company is None:
                raise NotFound(f"No company data for {domain}")
            await self.cache.set(key, company)
        else:
            company = cached
        return {"company": company, "domain": domain, "credits_used": 0, "source": "contactout"}

    async def verify_email(self, email: str, organization_id: str) -> dict[str, Any]:
        key = cache_key("verify", {"email": email.lower()})
        result, _ = await self._cached_call(
            key,
            organization_id,
            EMAIL_VERIFY_PATH,
            lambda: self.client.verify_email(email),
        )
        verification = result.get("data") if isinstance(result.get("data"), dict) else {}
        status = verification.get("status") or "unknown"
        return {
            "email": email,
            "is_valid": status == "valid",
            "status": status,
            "verification_result": verification,
            "verified_at": utc_now_iso(),
        }

    async def check_availability(self, linkedin_url: str, organization_id: str) -> dict[str, Any]:
        availability = await self.scorer_for(organization_id, 0).check_availability(linkedin_url)
        return {"linkedin_url": linkedin_url, **availability.model_dump(), "credits_used": 0}

    async def usage_stats(self, organization_id: str, period: str | None = None) -> dict[str, Any]:
        await self.limiter.enforce(organization_id, USAGE_STATS_PATH)
        stats = await self.client.usage_stats(period)
        usage = stats.get("usage") or {}
        return {
            "email_credits": usage.get("remaining", 0),
            "phone_credits": usage.get("phone_remaining", 0),
            "search_credits": usage.get("search_remaining", 0),
            "usage": {
                "email_reveals": usage.get("count", 0),
                "phone_reveals": usage.get("phone_count", 0),
                "searches": usage.get("search_count", 0),
            },
            "quota": {
                "email": usage.get("quota", 0),
                "phone": usage.get("phone_quota", 0),
                "search": usage.get("search_quota", 0),
            },
            "period": stats.get("period") or {},
        }

    async def submit_bulk_enrichment(
        self, linkedin_urls: list[str], include_phone: bool, organization_id: str
    ) -> dict[str, Any]:
        await self.limiter.enforce(organization_id, BULK_ENRICH_PATH)
        result = await self.client.submit_bulk_enrichment(linkedin_urls, include_phone=include_phone)
        self._audit(
            "bulk_submit",
            organization_id,
            profiles=len(linkedin_urls),
            job_id=result.get("job_id"),
        )
        return {
            "job_id": result.get("job_id"),
            "status": result.get("status"),
            "profiles_queued": len(linkedin_urls),
        }

    async def bulk_enrichment_status(self, job_id: str, organization_id: str) -> dict[str, Any]:
        await self.limiter.enforce(organization_id, f"{BULK_ENRICH_PATH}/{job_id}")
        result = await self.client.bulk_enrichment_status(job_id)
        data = result.get("data") if isinstance(result.get("data"), dict) else result
        return {
            "job_id": data.get("uuid") or job_id,
            "status": data.get("status"),
            "result": data.get("result") or {},
        }

    async def health(self) -> dict[str, Any]:
        try:
            stats = await self.client.usage_stats()
        except GatewayError as exc:
            return {"status": "unhealthy", "details": {"api_connected": False, "error": exc.message}}
        usage = stats.get("usage") or {}
        return {
            "status": "healthy",
            "details": {
                "api_connected": True,
                "remaining_credits": usage.get("remaining", usage.get("quota")),
            },
        }

    async def close(self) -> None:
        await self.client.aclose()
        try:
            await self.store.close()
        except StoreError as exc:
            logger.warning("Store close failed: %s", exc)
