import pytest

from media_providers.core.cache import MediaCache, make_cache_key
from media_providers.core.errors import ArgumentError


class DummyPayload:
    def __init__(self, name: str) -> None:
        self.name = name
        self.released = False

    def release(self) -> None:
        self.released = True


def test_cache_key_is_deterministic():
    assert make_cache_key("hi", "voice", "en", 1.0) == make_cache_key("hi", "voice", "en", 1.0)
    assert make_cache_key("hi", "voice", "en", 1.0) != make_cache_key("hi", "voice", "en", 1.25)
    assert make_cache_key("ab", "c") != make_cache_key("a", "bc")


def test_fifo_eviction_releases_oldest():
    cache = MediaCache(max_size=2)
    a, b, c = DummyPayload("a"), DummyPayload("b"), DummyPayload("c")
    cache.put("a", a)
    cache.put("b", b)

    # Reading does not refresh the entry.
    assert cache.get("a") is a

    cache.put("c", c)
    assert cache.keys() == ["b", "c"]
    assert a.released
    assert not b.released
    assert cache.get("a") is None


def test_put_existing_key_keeps_first_payload():
    cache = MediaCache(max_size=2)
    first, second = DummyPayload("1"), DummyPayload("2")
    cache.put("k", first)
    cache.put("k", second)
    assert cache.get("k") is first
    assert len(cache) == 1


def test_stale_entry_is_removed_on_get():
    cache = MediaCache()
    payload = DummyPayload("x")
    cache.put("x", payload)
    payload.release()

    assert cache.get("x") is None
    assert "x" not in cache


def test_clear_releases_everything():
    cache = MediaCache()
    items = [DummyPayload(str(i)) for i in range(3)]
    for i, item in enumerate(items):
        cache.put(str(i), item)

    cache.clear()
    assert len(cache) == 0
    assert all(item.released for item in items)


def test_invalid_size_rejected():
    with pytest.raises(ArgumentError):
        MediaCache(max_size=0)
