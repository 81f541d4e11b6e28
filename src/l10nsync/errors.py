"""Exception hierarchy for l10nsync.

Most failures in this library degrade to "no data" rather than raising:
transport errors and malformed resources are caught by the orchestrator
and recorded in load results. Only configuration misuse surfaces to callers.

Hierarchy:
    SyncError (base)
    ├─ ConfigurationError (invalid values, wrong lifecycle state)
    │  └─ AlreadyConfiguredError (second configure() call)
    ├─ TransportError (network failure, bad status, undecodable body)
    └─ ResourceParseError (malformed resource text)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, final

if TYPE_CHECKING:
    from l10nsync.enums import SyncState

__all__ = [
    "AlreadyConfiguredError",
    "ConfigurationError",
    "ResourceParseError",
    "SyncError",
    "TransportError",
]


class SyncError(Exception):
    """Base exception for all l10nsync errors."""


class ConfigurationError(SyncError):
    """Configuration is invalid or used in the wrong lifecycle state."""


@final
class AlreadyConfiguredError(ConfigurationError):
    """configure() was called on an orchestrator that is already configured.

    Reconfiguration is a programming error: the startup sync has already
    populated the cache and cannot be replayed.

    Attributes:
        state: Lifecycle state the orchestrator was in when the call was made
    """

    def __init__(self, state: SyncState) -> None:
        """Initialize AlreadyConfiguredError.

        Args:
            state: Current lifecycle state
        """
        super().__init__(f"Orchestrator is already configured (state: {state})")
        self.state = state


class TransportError(SyncError):
    """A remote read failed.

    Attributes:
        url: URL of the failed request
    """

    def __init__(self, message: str, *, url: str = "") -> None:
        """Initialize TransportError.

        Args:
            message: Human-readable description
            url: URL of the failed request
        """
        super().__init__(message)
        self.url = url


class ResourceParseError(SyncError):
    """Resource text could not be decoded into a key/value mapping.

    Attributes:
        parser_name: Name of the parser that rejected the text
    """

    def __init__(self, message: str, *, parser_name: str = "") -> None:
        """Initialize ResourceParseError.

        Args:
            message: Human-readable description
            parser_name: Name of the parser that rejected the text
        """
        super().__init__(message)
        self.parser_name = parser_name
