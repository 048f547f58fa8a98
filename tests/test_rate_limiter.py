import asyncio

import pytest

from leadgen_gateway.errors import RateLimitExceeded, StoreError
from leadgen_gateway.services.rate_limiter import RateLimiter, classify_endpoint
from leadgen_gateway.services.store import MemoryStore

CAPACITIES = {"people_search": 3, "contact_checker": 2, "other": 5}


class Clock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class BrokenStore(MemoryStore):
    async def incr(self, key, ttl_seconds):
        raise StoreError("connection refused")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/v1/people/search", "people_search"),
        ("/v1/people/linkedin/personal_email_status", "contact_checker"),
        ("/v1/people/linkedin/work_email_status", "contact_checker"),
        ("/v1/people/linkedin/phone_status", "contact_checker"),
        ("/v1/people/decision-makers", "other"),
        ("/v1/linkedin/enrich", "other"),
        ("/v1/stats", "other"),
        ("/v2/people/linkedin/batch/job-1", "other"),
    ],
)
def test_classify_endpoint(path, expected) -> None:
    assert classify_endpoint(path) == expected


def test_admits_exactly_capacity_then_resumes_next_window() -> None:
    clock = Clock(1_200.0)
    limiter = RateLimiter(MemoryStore(), CAPACITIES, clock=clock)

    async def scenario():
        first = [await limiter.admit("org-1", "people_search") for _ in range(4)]
        clock.now += 60
        after_rollover = await limiter.admit("org-1", "people_search")
        return first, after_rollover

    first, after_rollover = asyncio.run(scenario())
    assert [a.allowed for a in first] == [True, True, True, False]
    assert first[2].remaining == 0
    assert after_rollover.allowed is True


def test_rejection_reports_time_until_window_reset() -> None:
    clock = Clock(1_215.0)
    limiter = RateLimiter(MemoryStore(), CAPACITIES, clock=clock)

    async def scenario():
        for _ in range(2):
            await limiter.admit("org-1", "contact_checker")
        return await limiter.admit("org-1", "contact_checker")

    refused = asyncio.run(scenario())
    assert refused.allowed is False
    assert refused.retry_after == pytest.approx(45.0)


def test_buckets_are_per_organization_and_class() -> None:
    limiter = RateLimiter(MemoryStore(), CAPACITIES, clock=Clock(60.0))

    async def scenario():
        for _ in range(3):
            await limiter.admit("org-1", "people_search")
        return (
            await limiter.admit("org-1", "people_search"),
            await limiter.admit("org-2", "people_search"),
            await limiter.admit("org-1", "other"),
        )

    same, other_org, other_class = asyncio.run(scenario())
    assert same.allowed is False
    assert other_org.allowed is True
    assert other_class.allowed is True


def test_enforce_raises_with_retry_after() -> None:
    limiter = RateLimiter(MemoryStore(), {**CAPACITIES, "people_search": 1}, clock=Clock(30.0))

    async def scenario():
        await limiter.enforce("org", "/v1/people/search")
        await limiter.enforce("org", "/v1/people/search")

    with pytest.raises(RateLimitExceeded) as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.retry_after == pytest.approx(30.0)


def test_store_outage_fails_open_by_default() -> None:
    limiter = RateLimiter(BrokenStore(), CAPACITIES)
    assert asyncio.run(limiter.admit("org", "people_search")).allowed is True


def test_store_outage_fails_closed_when_configured() -> None:
    limiter = RateLimiter(BrokenStore(), CAPACITIES, fail_closed=True)
    assert asyncio.run(limiter.admit("org", "people_search")).allowed is False


def test_missing_capacity_is_a_configuration_error() -> None:
    with pytest.raises(ValueError):
        RateLimiter(MemoryStore(), {"people_search": 1})
