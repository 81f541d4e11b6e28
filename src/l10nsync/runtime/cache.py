"""Per-(locale, component) message cache.

Architecture:
    - One ComponentMessages slot per (locale, component) pair
    - Slots created lazily on first access, never removed (bounded, known-key
      cache; no eviction)
    - Slot table guarded by an RWLock with double-checked creation
    - Slot contents are not locked: each load task owns exactly one slot.
      The slot key is the DedupKey of the pair, so a slot has a single
      writer by construction, and is read-shared once populated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from l10nsync.locale_utils import normalize_locale
from l10nsync.runtime.dedup import DedupKey
from l10nsync.runtime.rwlock import RWLock

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

__all__ = ["BundleCache", "ComponentMessages"]

logger = logging.getLogger(__name__)


class ComponentMessages:
    """Mutable key -> string mapping for exactly one (locale, component) pair.

    Attributes:
        locale: Requested locale this slot serves
        component: Component name
        resource_path: Path of the external bundle the slot was filled from, if any
        resource_type: Parser name of that bundle, if any
    """

    __slots__ = ("_messages", "component", "locale", "resource_path", "resource_type")

    def __init__(self, locale: str, component: str) -> None:
        self.locale = locale
        self.component = component
        self.resource_path: str | None = None
        self.resource_type: str | None = None
        self._messages: dict[str, str] = {}

    def get_string(self, key: str) -> str | None:
        """Return the message for key, or None if absent."""
        return self._messages.get(key)

    def set_string(self, key: str, value: str) -> None:
        """Insert or overwrite a message. Last writer wins."""
        self._messages[key] = value

    def update(self, messages: Mapping[str, object]) -> None:
        """Copy every entry of messages into the slot, stringifying values."""
        for key, value in messages.items():
            self.set_string(str(key), str(value))

    def count(self) -> int:
        """Number of populated keys."""
        return len(self._messages)

    def keys(self) -> list[str]:
        """Snapshot of populated keys."""
        return list(self._messages)

    def as_dict(self) -> dict[str, str]:
        """Snapshot copy of the slot contents."""
        return dict(self._messages)

    def __contains__(self, key: object) -> bool:
        return key in self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __repr__(self) -> str:
        return (
            f"ComponentMessages(locale={self.locale!r}, "
            f"component={self.component!r}, count={self.count()})"
        )


class BundleCache:
    """Thread-safe table of ComponentMessages slots keyed by (locale, component).

    Lookups are case-insensitive on both locale and component.

    Example:
        >>> cache = BundleCache()
        >>> slot = cache.get_or_create("de", "about")
        >>> slot.set_string("title", "Über")
        >>> cache.get_or_create("DE", "About").get_string("title")
        'Über'
    """

    __slots__ = ("_lock", "_slots")

    def __init__(self) -> None:
        self._slots: dict[DedupKey, ComponentMessages] = {}
        self._lock = RWLock()

    def get_or_create(self, locale: str, component: str) -> ComponentMessages:
        """Return the slot for (locale, component), creating an empty one on first access.

        Thread-safe via double-checked locking: read lock for the common
        existing-slot case, write lock only when a slot must be created.
        """
        key = DedupKey.of(locale, component)
        with self._lock.read():
            slot = self._slots.get(key)
            if slot is not None:
                return slot

        with self._lock.write():
            slot = self._slots.get(key)
            if slot is None:
                slot = ComponentMessages(locale, component)
                self._slots[key] = slot
                logger.debug("Created cache slot %s/%s", locale, component)
            return slot

    def peek(self, locale: str, component: str) -> ComponentMessages | None:
        """Return the slot for (locale, component) without creating it."""
        with self._lock.read():
            return self._slots.get(DedupKey.of(locale, component))

    def components_for(self, locale: str) -> dict[str, ComponentMessages]:
        """Return non-empty slots of one locale, keyed by component name."""
        wanted = normalize_locale(locale)
        with self._lock.read():
            slots = [slot for key, slot in self._slots.items() if key.locale == wanted]
        return {slot.component: slot for slot in slots if slot.count() > 0}

    def count(self) -> int:
        """Total number of populated keys across all slots."""
        with self._lock.read():
            slots = list(self._slots.values())
        return sum(slot.count() for slot in slots)

    def __iter__(self) -> Iterator[ComponentMessages]:
        with self._lock.read():
            slots = list(self._slots.values())
        return iter(slots)

    def __len__(self) -> int:
        """Number of slots, populated or not."""
        with self._lock.read():
            return len(self._slots)

    def __repr__(self) -> str:
        return f"BundleCache(slots={len(self)}, keys={self.count()})"
