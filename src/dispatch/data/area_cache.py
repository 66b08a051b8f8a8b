"""City to distribution-area lookup cache."""

from __future__ import annotations

from threading import Lock
from typing import Callable, Optional

# Abbreviations used by staff when typing city names.
CITY_ALIASES = {
    'פ"ת': "פתח תקווה",
    'ת"א': "תל אביב",
    "י-ם": "ירושלים",
}

_MISSING = object()


def normalize_city(city: str) -> str:
    name = (city or "").strip()
    return CITY_ALIASES.get(name, name)


class AreaLookupCache:
    """Key/value memo for city -> area lookups with manual invalidation.

    Misses (``None``) are cached as well so an unknown city is only looked up
    once until the cache is invalidated.
    """

    def __init__(self) -> None:
        self._values: dict[str, Optional[str]] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, city: str) -> bool:
        return normalize_city(city) in self._values

    def get(self, city: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(normalize_city(city), default)

    def set(self, city: str, area: Optional[str]) -> None:
        with self._lock:
            self._values[normalize_city(city)] = area

    def invalidate(self, city: Optional[str] = None) -> None:
        with self._lock:
            if city is None:
                self._values.clear()
            else:
                self._values.pop(normalize_city(city), None)

    def resolve_area(self, city: str, loader: Callable[[str], Optional[str]]) -> Optional[str]:
        """Return the cached area for ``city`` or load and remember it."""

        key = normalize_city(city)
        cached = self._values.get(key, _MISSING)
        if cached is not _MISSING:
            return cached  # type: ignore[return-value]
        area = loader(key)
        self.set(key, area)
        return area
