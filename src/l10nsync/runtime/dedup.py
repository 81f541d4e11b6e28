"""At-most-once load tracking.

DedupTracker records which locales and (locale, component) pairs have
been claimed for loading. Once a key is marked it stays marked for the
lifetime of the process; a marked key is never fetched again.

Two granularities coexist:
    - locale scope: (locale, None), covers every component of that locale
    - pair scope:   (locale, component)

A pair is considered handled when either its own key or its locale-scope
key is marked.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from l10nsync.locale_utils import normalize_locale

__all__ = ["DedupKey", "DedupTracker"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DedupKey:
    """Normalized dedup key.

    Build instances through DedupKey.of() so that locale and component are
    case-normalized before hashing.

    Attributes:
        locale: Normalized locale
        component: Normalized component, or None for the locale-wide scope
    """

    locale: str
    component: str | None = None

    @classmethod
    def of(cls, locale: str, component: str | None = None) -> DedupKey:
        """Create a normalized key."""
        return cls(
            normalize_locale(locale),
            component.strip().lower() if component is not None else None,
        )

    @property
    def scope(self) -> DedupKey:
        """Locale-wide key covering this key."""
        return DedupKey(self.locale)


class DedupTracker:
    """Thread-safe, case-insensitive set of loaded keys.

    Workers of the concurrent startup phase call claim() to decide whether
    they own a pair. claim() checks both granularities and marks the pair
    under one lock acquisition, so two workers can never both own the same
    (locale, component) pair.

    Example:
        >>> tracker = DedupTracker()
        >>> tracker.claim("de", "about")
        True
        >>> tracker.claim("DE", "About")
        False
    """

    __slots__ = ("_keys", "_lock")

    def __init__(self) -> None:
        """Initialize an empty tracker."""
        self._keys: set[DedupKey] = set()
        self._lock = threading.Lock()

    def contains(self, key: DedupKey) -> bool:
        """Check whether key, or the locale scope covering it, is marked."""
        with self._lock:
            return key in self._keys or key.scope in self._keys

    def mark_loaded(self, key: DedupKey) -> None:
        """Mark key as loaded. Idempotent."""
        with self._lock:
            self._keys.add(key)

    def is_handled(self, locale: str, component: str | None = None) -> bool:
        """Check whether (locale, component) or the whole locale is marked."""
        return self.contains(DedupKey.of(locale, component))

    def claim(self, locale: str, component: str | None = None) -> bool:
        """Atomically check-and-mark a pair.

        Args:
            locale: Requested locale
            component: Component name, or None to claim the whole locale

        Returns:
            True if the caller now owns the key and must load it,
            False if it (or its locale scope) was already marked
        """
        key = DedupKey.of(locale, component)
        with self._lock:
            if key in self._keys or key.scope in self._keys:
                logger.debug("Already handled: %s/%s", locale, component)
                return False
            self._keys.add(key)
            return True

    def __len__(self) -> int:
        """Number of marked keys."""
        with self._lock:
            return len(self._keys)

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"DedupTracker(keys={len(self)})"
