"""Enumerations for l10nsync type-safe constants.

Uses StrEnum for automatic string conversion: members compare equal to
their string values, so configuration strings can be checked directly.
"""

from enum import StrEnum

__all__ = [
    "LoadStatus",
    "ResourceFormat",
    "StoreType",
    "SyncState",
]


class StoreType(StrEnum):
    """Where an offline resource lives.

    StrEnum provides automatic string conversion: str(StoreType.INTERNAL) == "internal"
    """

    INTERNAL = "internal"
    """Embedded resource inside an importable package."""

    EXTERNAL = "external"
    """File on disk, or an HTTP(S) URL read through the transport."""


class ResourceFormat(StrEnum):
    """Names of the built-in resource parsers."""

    BUNDLE = "bundle"
    """JSON bundle: {"messages": {...}} or a flat object."""

    PROPERTIES = "properties"
    """Java-style .properties file."""

    @property
    def extension(self) -> str:
        """File extension used by the canonical path convention."""
        return "json" if self is ResourceFormat.BUNDLE else "properties"


class SyncState(StrEnum):
    """Lifecycle of a SyncOrchestrator."""

    UNCONFIGURED = "unconfigured"
    CONFIGURING = "configuring"
    ONLINE_SYNC = "online_sync"
    OFFLINE_LOAD = "offline_load"
    STARTUP_LOADED = "startup_loaded"
    READY = "ready"


class LoadStatus(StrEnum):
    """Outcome of loading one (locale, component) pair."""

    LOADED = "loaded"
    """A near-locale yielded messages."""

    EMPTY = "empty"
    """No position in the fallback chain yielded data. Not an error."""

    SKIPPED = "skipped"
    """Pair (or its whole locale) was already handled."""

    ERROR = "error"
    """Unexpected failure while loading; recorded, never raised."""
