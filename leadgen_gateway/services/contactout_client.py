import logging
from typing import Any

import httpx

from ..config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, USER_AGENT
from ..errors import (
    AuthenticationFailed,
    BadRequest,
    Forbidden,
    NetworkError,
    RateLimitExceeded,
    UpstreamError,
)
from .response_parsing import normalize_profiles
from .utils.constants import (
    BULK_ENRICH_PATH,
    CONTACT_STATUS_PATHS,
    DECISION_MAKERS_PATH,
    DOMAIN_ENRICH_PATH,
    EMAIL_ENRICH_PATH,
    EMAIL_VERIFY_PATH,
    LINKEDIN_ENRICH_PATH,
    PEOPLE_SEARCH_PATH,
    USAGE_STATS_PATH,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error"):
            if isinstance(data.get(key), str) and data[key]:
                return data[key]
    return response.reason_phrase or f"HTTP {response.status_code}"


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("retry-after")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def raise_for_upstream_status(response: httpx.Response) -> None:
    status = response.status_code
    if 200 <= status < 300:
        return
    message = _error_message(response)
    if status == 400:
        raise BadRequest(f"Bad request: {message}")
    if status == 401:
        raise AuthenticationFailed("Authentication failed: Invalid API key")
    if status == 403:
        raise Forbidden(f"Access forbidden: {message}")
    if status == 429:
        retry_after = _retry_after(response)
        raise RateLimitExceeded(
            f"Upstream rate limit exceeded. Retry after {retry_after} seconds"
            if retry_after is not None
            else "Upstream rate limit exceeded",
            retry_after=retry_after,
        )
    raise UpstreamError(status, f"API error ({status}): {message}")


class ContactOutClient:
    """Authenticated, error-classifying wrapper around the people-data API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "authorization": "basic",
                "token": api_key,
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        logger.debug("upstream %s %s params=%s", method, path, params)
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.RequestError as exc:
            logger.error("upstream %s %s failed without a response: %r", method, path, exc)
            raise NetworkError(f"Network error: {exc}") from exc

        if response.status_code >= 300:
            logger.error(
                "upstream %s %s -> %s body=%s",
                method,
                path,
                response.status_code,
                response.text,
            )
        raise_for_upstream_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(response.status_code, "Upstream returned invalid JSON") from exc
        logger.debug("upstream %s %s -> %s", method, path, response.status_code)
        return data if isinstance(data, dict) else {"data": data}

    async def search_people(self, params: dict[str, Any]) -> dict[str, Any]:
        data = await self.request("POST", PEOPLE_SEARCH_PATH, json=params)
        return {
            "metadata": data.get("metadata") or {},
            "profiles": normalize_profiles(data.get("profiles")),
        }

    async def decision_makers(self, params: dict[str, Any]) -> dict[str, Any]:
        query = {k: str(v).lower() if isinstance(v, bool) else v for k, v in params.items()}
        data = await self.request("GET", DECISION_MAKERS_PATH, params=query)
        return {
            "metadata": data.get("metadata") or {},
            "profiles": normalize_profiles(data.get("profiles")),
        }

    async def enrich_linkedin(self, profile_url: str, profile_only: bool = False) -> dict[str, Any]:
        return await self.request(
            "GET",
            LINKEDIN_ENRICH_PATH,
            params={"profile": profile_url, "profile_only": str(profile_only).lower()},
        )

    async def enrich_email(self, email: str, include_work_email: bool = False) -> dict[str, Any]:
        params = {"email": email}
        if include_work_email:
            params["include"] = "work_email"
        return await self.request("GET", EMAIL_ENRICH_PATH, params=params)

    async def enrich_domains(self, domains: list[str]) -> dict[str, Any]:
        return await self.request("POST", DOMAIN_ENRICH_PATH, json={"domains": domains})

    async def verify_email(self, email: str) -> dict[str, Any]:
        return await self.request("GET", EMAIL_VERIFY_PATH, params={"email": email})

    async def contact_status(self, profile_url: str, contact_type: str) -> dict[str, Any]:
        path = CONTACT_STATUS_PATHS[contact_type]
        return await self.request("GET", path, params={"profile": profile_url})

    async def usage_stats(self, period: str | None = None) -> dict[str, Any]:
        params = {"period": period} if period else None
        return await self.request("GET", USAGE_STATS_PATH, params=params)

    async def submit_bulk_enrichment(
        self, profile_urls: list[str], include_phone: bool = False
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"profiles": profile_urls}
        if include_phone:
            body["include_phone"] = True
        return await self.request("POST", BULK_ENRICH_PATH, json=body)

    async def bulk_enrichment_status(self, job_id: str) -> dict[str, Any]:
        return await self.request("GET", f"{BULK_ENRICH_PATH}/{job_id}")

    async def aclose(self) -> None:
        await self._client.aclose()
