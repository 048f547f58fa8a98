import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from leadgen_gateway.errors import StoreError
from leadgen_gateway.services.store import MemoryStore, RedisStore, build_store


class FakePipeline:
    def __init__(self, redis: "FakeRedis") -> None:
        self.redis = redis
        self.queued: list[tuple[str, tuple, dict]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False

    def set(self, *args, **kwargs) -> "FakePipeline":
        self.queued.append(("set", args, kwargs))
        return self

    def incr(self, *args, **kwargs) -> "FakePipeline":
        self.queued.append(("incr", args, kwargs))
        return self

    async def execute(self) -> list:
        self.redis._check()
        self.redis.transactions += 1
        return [await getattr(self.redis, name)(*args, **kwargs) for name, args, kwargs in self.queued]


class FakeRedis:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.transactions = 0
        self.values: dict[str, str] = {}
        self.expiries: dict[str, int] = {}

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("Connection refused")

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        assert transaction is True
        return FakePipeline(self)

    async def get(self, key):
        self._check()
        return self.values.get(key)

    async def set(self, key, value, ex=None, nx=False):
        self._check()
        if nx and key in self.values:
            return None
        self.values[key] = str(value)
        self.expiries[key] = ex
        return True

    async def incr(self, key):
        self._check()
        self.values[key] = str(int(self.values.get(key, "0")) + 1)
        return int(self.values[key])

    async def aclose(self):
        self._check()


def test_memory_store_counter_expires() -> None:
    now = [0.0]
    store = MemoryStore(clock=lambda: now[0])

    async def scenario():
        counts = [await store.incr("k", 60) for _ in range(3)]
        now[0] = 60.0
        return counts, await store.incr("k", 60)

    counts, after = asyncio.run(scenario())
    assert counts == [1, 2, 3]
    assert after == 1


def test_memory_store_reclaims_keys_that_are_never_read_again() -> None:
    now = [0.0]
    store = MemoryStore(clock=lambda: now[0])

    async def scenario():
        for window in range(1000):
            now[0] = window * 60.0
            await store.incr(f"ratelimit:other:org:{window}", 60)
            await store.set(f"search:{window}", "{}", 30)

    asyncio.run(scenario())
    assert len(store) <= 2


def test_memory_store_rewritten_key_keeps_its_new_expiry() -> None:
    now = [0.0]
    store = MemoryStore(clock=lambda: now[0])

    async def scenario():
        await store.set("company:acme", "old", 10)
        now[0] = 5.0
        await store.set("company:acme", "new", 100)
        now[0] = 20.0
        await store.set("other", "x", 100)
        return await store.get("company:acme")

    assert asyncio.run(scenario()) == "new"


def test_redis_store_counts_in_one_transaction_with_ttl_set_once() -> None:
    fake = FakeRedis()
    store = RedisStore(client=fake)

    async def scenario():
        first = await store.incr("bucket", 60)
        fake.expiries["bucket"] = None
        second = await store.incr("bucket", 60)
        await store.set("cache", "{}", 3600)
        return first, second, await store.get("cache")

    assert asyncio.run(scenario()) == (1, 2, "{}")
    assert fake.transactions == 2
    assert fake.expiries == {"bucket": None, "cache": 3600}


@pytest.mark.parametrize("operation", ["get", "set", "incr", "close"])
def test_redis_errors_become_store_errors(operation) -> None:
    store = RedisStore(client=FakeRedis(fail=True))
    calls = {
        "get": lambda: store.get("k"),
        "set": lambda: store.set("k", "v", 10),
        "incr": lambda: store.incr("k", 10),
        "close": lambda: store.close(),
    }
    with pytest.raises(StoreError):
        asyncio.run(calls[operation]())


def test_build_store_without_url_is_in_memory() -> None:
    assert isinstance(build_store(""), MemoryStore)
