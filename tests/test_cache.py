from __future__ import annotations

from datetime import timedelta

import pytest

from codesmith.highlight.cache import CacheKey, HighlightCache, content_hash, source_digest
from codesmith.highlight.structure import RenderedBlock


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _block(html: str = "<pre></pre>") -> RenderedBlock:
    return RenderedBlock(html=html, language="python", theme="default", requested_language="python")


def test_content_hash_matches_rolling_hash() -> None:
    assert content_hash("") == 0
    assert content_hash("a") == 97
    assert content_hash("ab") == 97 * 31 + 98
    assert content_hash("hello") == 99162322


def test_content_hash_wraps_to_signed_32_bits() -> None:
    value = content_hash("x" * 1000)
    assert -(2**31) <= value < 2**31


def test_cache_key_is_deterministic() -> None:
    first = CacheKey.for_code("print(1)", "python", "monokai", variant="copy")
    second = CacheKey.for_code("print(1)", "python", "monokai", variant="copy")
    assert first == second
    assert hash(first) == hash(second)
    assert str(first).startswith("python-monokai-")
    assert first != CacheKey.for_code("print(1)", "python", "monokai")


def test_get_returns_stored_entry() -> None:
    cache = HighlightCache()
    key = CacheKey.for_code("x", "python", "default")
    entry = cache.entry_for(_block(), "x")
    cache.put(key, entry)
    assert cache.get(key) is entry
    assert key in cache
    assert len(cache) == 1


def test_entries_verify_source_digest() -> None:
    cache = HighlightCache()
    entry = cache.entry_for(_block(), "print(1)")
    assert entry.digest == source_digest("print(1)")
    assert entry.matches("print(1)")
    assert not entry.matches("print(2)")


def test_expired_entries_are_dropped_lazily() -> None:
    clock = FakeClock()
    cache = HighlightCache(expiry=timedelta(seconds=60), clock=clock)
    key = CacheKey.for_code("x", "python", "default")
    cache.put(key, cache.entry_for(_block(), "x"))

    clock.now += 60
    assert cache.get(key) is not None
    clock.now += 1
    assert cache.get(key) is None
    assert len(cache) == 0


def test_short_ttl_is_capped_by_expiry() -> None:
    cache = HighlightCache(expiry=timedelta(seconds=60))
    assert cache.entry_for(_block(), "x", ttl=timedelta(minutes=5)).ttl == 60
    assert cache.entry_for(_block(), "x", ttl=timedelta(seconds=10)).ttl == 10


def test_least_recently_used_entry_is_evicted() -> None:
    cache = HighlightCache(max_size=2)
    keys = [CacheKey.for_code(code, "python", "default") for code in ("a", "b", "c")]
    cache.put(keys[0], cache.entry_for(_block(), "a"))
    cache.put(keys[1], cache.entry_for(_block(), "b"))

    assert cache.get(keys[0]) is not None
    cache.put(keys[2], cache.entry_for(_block(), "c"))

    assert keys[0] in cache
    assert keys[1] not in cache
    assert keys[2] in cache


def test_resize_evicts_and_updates_expiry() -> None:
    cache = HighlightCache(max_size=3)
    for code in ("a", "b", "c"):
        cache.put(CacheKey.for_code(code, "python", "default"), cache.entry_for(_block(), code))
    cache.resize(1, timedelta(days=1))
    assert len(cache) == 1
    assert CacheKey.for_code("c", "python", "default") in cache
    assert cache.expiry == timedelta(days=1)


def test_clear_and_discard() -> None:
    cache = HighlightCache()
    key = CacheKey.for_code("a", "python", "default")
    cache.put(key, cache.entry_for(_block(), "a"))
    cache.discard(key)
    assert len(cache) == 0
    cache.put(key, cache.entry_for(_block(), "a"))
    cache.clear()
    assert cache.get(key) is None


def test_invalid_size_is_rejected() -> None:
    with pytest.raises(ValueError):
        HighlightCache(max_size=0)
    with pytest.raises(ValueError):
        HighlightCache().resize(0)
