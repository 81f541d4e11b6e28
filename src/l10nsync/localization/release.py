"""Known locales and components of a release.

ReleaseInfo keeps two scopes side by side:
    local  - declared offline (configuration or external resource scan)
    remote - declared by the translation service (brief info)

Each scope holds two ordered, append-only, case-insensitively deduplicated
lists. Scopes are mutated from load workers, so every operation is
guarded by a lock.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from l10nsync.locale_utils import normalize_locale

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

__all__ = ["KnownList", "ReleaseInfo", "ScopeInfo"]


class KnownList:
    """Ordered, append-only list with case-insensitive membership."""

    __slots__ = ("_items", "_keys", "_lock", "_normalize")

    def __init__(self, *, locales: bool = False) -> None:
        self._items: list[str] = []
        self._keys: set[str] = set()
        self._lock = threading.Lock()
        self._normalize = normalize_locale if locales else _normalize_name

    def extend(self, items: Iterable[str]) -> int:
        """Append items not already present. Returns the number appended."""
        added = 0
        with self._lock:
            for item in items:
                key = self._normalize(item)
                if key and key not in self._keys:
                    self._keys.add(key)
                    self._items.append(item.strip())
                    added += 1
        return added

    def append(self, item: str) -> bool:
        """Append item if not already present."""
        return self.extend((item,)) == 1

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, str):
            return False
        with self._lock:
            return self._normalize(item) in self._keys

    def snapshot(self) -> tuple[str, ...]:
        """Items in insertion order."""
        with self._lock:
            return tuple(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __repr__(self) -> str:
        return f"KnownList({list(self.snapshot())!r})"


def _normalize_name(name: str) -> str:
    return name.strip().lower()


class ScopeInfo:
    """Locales and components known from one source.

    Attributes:
        locales: Known locales
        components: Known components
    """

    __slots__ = ("components", "locales")

    def __init__(self) -> None:
        self.locales = KnownList(locales=True)
        self.components = KnownList()

    def __repr__(self) -> str:
        return f"ScopeInfo(locales={len(self.locales)}, components={len(self.components)})"


class ReleaseInfo:
    """Local and remote scopes of a release.

    Attributes:
        local: Offline-declared scope
        remote: Service-declared scope
    """

    __slots__ = ("local", "remote")

    def __init__(self) -> None:
        self.local = ScopeInfo()
        self.remote = ScopeInfo()

    def local_only_components(self) -> tuple[str, ...]:
        """Components declared locally but absent from the remote declaration."""
        return tuple(c for c in self.local.components if c not in self.remote.components)

    def all_locales(self) -> tuple[str, ...]:
        """Remote locales followed by local-only locales."""
        merged = KnownList(locales=True)
        merged.extend(self.remote.locales)
        merged.extend(self.local.locales)
        return merged.snapshot()

    def __repr__(self) -> str:
        return f"ReleaseInfo(local={self.local!r}, remote={self.remote!r})"
