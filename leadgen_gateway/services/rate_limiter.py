"""Fixed-window, per-organization limiter over the shared counter store."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import RateLimitExceeded, StoreError
from .store import KeyValueStore
from .utils.constants import RATE_LIMIT_WINDOW_SECONDS

logger = logging.getLogger(__name__)

PEOPLE_SEARCH = "people_search"
CONTACT_CHECKER = "contact_checker"
OTHER = "other"
ENDPOINT_CLASSES = (PEOPLE_SEARCH, CONTACT_CHECKER, OTHER)


def classify_endpoint(path: str) -> str:
    """Map an upstream path onto its capacity class."""
    normalized = path.split("?", 1)[0].rstrip("/")
    if "search" in normalized:
        return PEOPLE_SEARCH
    if normalized.endswith("status"):
        return CONTACT_CHECKER
    return OTHER


@dataclass(frozen=True)
class Admission:
    allowed: bool
    endpoint_class: str
    count: int
    capacity: int
    retry_after: float = 0.0

    @property
    def remaining(self) -> int:
        return max(0, self.capacity - self.count)


class RateLimiter:
    def __init__(
        self,
        store: KeyValueStore,
        capacities: dict[str, int],
        *,
        fail_closed: bool = False,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        missing = [name for name in ENDPOINT_CLASSES if name not in capacities]
        if missing:
            raise ValueError(f"missing capacities for {missing}")
        self.store = store
        self.capacities = dict(capacities)
        self.fail_closed = fail_closed
        self.window_seconds = window_seconds
        self._clock = clock

    async def admit(self, organization_id: str, endpoint_class: str) -> Admission:
        capacity = self.capacities[endpoint_class]
        now = self._clock()
        window = int(now // self.window_seconds)
        retry_after = (window + 1) * self.window_seconds - now
        key = f"ratelimit:{endpoint_class}:{organization_id}:{window}"

        try:
            count = await self.store.incr(key, self.window_seconds)
        except StoreError as exc:
            if self.fail_closed:
                logger.error(
                    "Rate limit store unavailable, refusing %s for %s: %s",
                    endpoint_class,
                    organization_id,
                    exc,
                )
                return Admission(False, endpoint_class, capacity, capacity, retry_after)
            logger.warning(
                "Rate limit store unavailable, admitting %s for %s: %s",
                endpoint_class,
                organization_id,
                exc,
            )
            return Admission(True, endpoint_class, 0, capacity)

        if count > capacity:
            return Admission(False, endpoint_class, capacity, capacity, retry_after)
        return Admission(True, endpoint_class, count, capacity)

    async def enforce(self, organization_id: str, path: str) -> Admission:
        endpoint_class = classify_endpoint(path)
        admission = await self.admit(organization_id, endpoint_class)
        if not admission.allowed:
            raise RateLimitExceeded(
                f"Rate limit exceeded for {endpoint_class}. Try again later.",
                retry_after=round(admission.retry_after, 3),
            )
        return admission
