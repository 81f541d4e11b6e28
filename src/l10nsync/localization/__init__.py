"""Release configuration, resource loading and the synchronization orchestrator.

Submodules:
    types        - PEP 695 type aliases (LocaleCode, ComponentName, MessageKey, Messages)
    config       - SyncConfig, ComponentConfig
    release      - ReleaseInfo, ScopeInfo, KnownList
    transport    - Transport protocol, HttpxTransport, RemoteApi
    loading      - Parsers, storage descriptors, ResourceReader, OfflineLoader,
                   LoadTask, BundleLoadResult, SyncSummary
    context      - Current-locale ContextVar helpers
    orchestrator - SyncOrchestrator

Python 3.13+.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability

from l10nsync.enums import LoadStatus
from l10nsync.localization.config import ComponentConfig, SyncConfig
from l10nsync.localization.context import (
    get_current_locale,
    reset_current_locale,
    set_current_locale,
)
from l10nsync.localization.loading import (
    BundleLoadResult,
    JsonBundleParser,
    LoadTask,
    OfflineLoader,
    PackageResourceReader,
    ParserRegistry,
    PropertiesParser,
    ResourceParser,
    ResourceReader,
    StorageDescriptor,
    SyncSummary,
)
from l10nsync.localization.orchestrator import SyncOrchestrator
from l10nsync.localization.release import KnownList, ReleaseInfo, ScopeInfo
from l10nsync.localization.transport import HttpxTransport, RemoteApi, Transport
from l10nsync.localization.types import ComponentName, LocaleCode, MessageKey, Messages

__all__ = [
    # Main orchestrator
    "SyncOrchestrator",
    # Configuration
    "SyncConfig",
    "ComponentConfig",
    # Release scopes
    "ReleaseInfo",
    "ScopeInfo",
    "KnownList",
    # Remote collaborator
    "Transport",
    "HttpxTransport",
    "RemoteApi",
    # Offline collaborators
    "ResourceParser",
    "JsonBundleParser",
    "PropertiesParser",
    "ParserRegistry",
    "StorageDescriptor",
    "ResourceReader",
    "PackageResourceReader",
    "OfflineLoader",
    # Load tracking
    "LoadStatus",
    "LoadTask",
    "BundleLoadResult",
    "SyncSummary",
    # Current locale
    "get_current_locale",
    "set_current_locale",
    "reset_current_locale",
    # Type aliases for user code type annotations
    "ComponentName",
    "LocaleCode",
    "MessageKey",
    "Messages",
]
