"""Content-addressed cache for rendered blocks.

Keys combine the language, the theme, a fast 32-bit hash of the source and a
*variant* string describing the presentational options, so identical inputs
always map to the same key. Entries carry a SHA-1 digest of the source which
callers compare at read time: a collision of the 32-bit hash can cost a
re-render but never serves markup computed from different text.

Expiry is evaluated lazily when an entry is read. The cache is additionally
bounded: inserting beyond ``max_size`` evicts the least recently used entry.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
import hashlib
import time
from typing import TYPE_CHECKING


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .structure import RenderedBlock


Clock = Callable[[], float]


def content_hash(text: str) -> int:
    """Return the signed 32-bit ``h * 31 + c`` rolling hash of ``text``."""
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def source_digest(text: str) -> str:
    """Return the collision-resistant digest stored alongside cache entries."""
    return hashlib.sha1(text.encode("utf-8"), usedforsecurity=False).hexdigest()


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Composite key identifying one rendering of one fragment."""

    language: str
    theme: str
    source_hash: int
    variant: str = ""

    @classmethod
    def for_code(cls, code: str, language: str, theme: str, variant: str = "") -> CacheKey:
        """Build the key for ``code`` rendered with ``language`` and ``theme``."""
        return cls(language=language, theme=theme, source_hash=content_hash(code), variant=variant)

    def __str__(self) -> str:
        suffix = f"-{self.variant}" if self.variant else ""
        return f"{self.language}-{self.theme}-{self.source_hash}{suffix}"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Rendered block stored in the cache. Never mutated after insertion."""

    block: RenderedBlock
    created_at: float
    digest: str
    ttl: float

    def matches(self, code: str) -> bool:
        """Return True when the entry was computed from ``code``."""
        return self.digest == source_digest(code)

    def expired(self, now: float) -> bool:
        """Return True once the entry is older than its time-to-live."""
        return now - self.created_at > self.ttl


class HighlightCache:
    """In-memory store mapping :class:`CacheKey` to :class:`CacheEntry`."""

    def __init__(
        self,
        *,
        max_size: int = 100,
        expiry: timedelta = timedelta(days=7),
        clock: Clock = time.time,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.expiry = expiry
        self.clock = clock
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()

    def entry_for(
        self, block: RenderedBlock, code: str, *, ttl: timedelta | None = None
    ) -> CacheEntry:
        """Build an entry for ``block`` stamped with the current time."""
        lifetime = self.expiry if ttl is None else min(ttl, self.expiry)
        return CacheEntry(
            block=block,
            created_at=self.clock(),
            digest=source_digest(code),
            ttl=lifetime.total_seconds(),
        )

    def get(self, key: CacheKey) -> CacheEntry | None:
        """Return the live entry stored under ``key``, if any."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self.clock()):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def put(self, key: CacheKey, entry: CacheEntry) -> None:
        """Store ``entry`` under ``key``, evicting the least recently used."""
        self._entries[key] = entry
        self._entries.move_to_end(key)
        self._evict()

    def discard(self, key: CacheKey) -> None:
        """Forget the entry stored under ``key``."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def resize(self, max_size: int, expiry: timedelta | None = None) -> None:
        """Apply new bounds, evicting entries when the cache shrinks."""
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        if expiry is not None:
            self.expiry = expiry
        self._evict()

    def _evict(self) -> None:
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = [
    "CacheEntry",
    "CacheKey",
    "HighlightCache",
    "content_hash",
    "source_digest",
]
