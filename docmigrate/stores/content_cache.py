"""In-memory cache for version-agnostic transformation results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from ..models import CacheEntry


@dataclass(frozen=True)
class CacheStats:
    invocations: int
    hits: int
    misses: int
    entries: int


class ContentCache:
    """Stores :class:`CacheEntry` objects keyed by the SHA-256 of raw file bytes.

    ``invocations`` counts how often the structural stage actually ran through
    :meth:`get_or_compute`; it equals the number of unique checksums in a run.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._invocations = 0

    def get(self, checksum: str) -> Optional[CacheEntry]:
        entry = self._entries.get(checksum)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry

    def put(self, checksum: str, entry: CacheEntry) -> None:
        if entry.checksum != checksum:
            raise ValueError(f"Cache entry checksum {entry.checksum} does not match key {checksum}")
        self._entries[checksum] = entry

    def get_or_compute(self, checksum: str, compute: Callable[[], CacheEntry]) -> Tuple[CacheEntry, bool]:
        """Return ``(entry, hit)``, running ``compute`` only on a miss."""
        cached = self.get(checksum)
        if cached is not None:
            return cached, True
        self._invocations += 1
        entry = compute()
        self.put(checksum, entry)
        return entry, False

    def __contains__(self, checksum: object) -> bool:
        return checksum in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def checksums(self) -> Iterable[str]:
        return sorted(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(
            invocations=self._invocations,
            hits=self._hits,
            misses=self._misses,
            entries=len(self._entries),
        )

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        self._invocations = 0


__all__ = ["CacheStats", "ContentCache"]
