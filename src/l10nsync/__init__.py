"""l10nsync - client-side localized message bundle synchronization.

Resolves, caches and synchronizes message bundles across a locale
fallback chain and a set of components, sourced from a remote translation
service or from local and embedded resources.

Public API:
    SyncOrchestrator - Startup synchronization and message reads
    SyncConfig - Release configuration
    ComponentConfig - Per-component locale and storage declarations
    LocaleResolver - Fallback chain builder
    BundleCache - Per-(locale, component) message cache
    DedupTracker - At-most-once load tracking
    PlaceholderFormatter - Positional placeholder substitution

Exceptions:
    SyncError - Base exception class
    ConfigurationError - Invalid configuration or lifecycle misuse
    AlreadyConfiguredError - Second configure() call
    TransportError - Remote read failures
    ResourceParseError - Malformed resource text

Submodules:
    l10nsync.runtime - Resolver, cache, tracker, formatters, batching
    l10nsync.localization - Configuration, loading, transport, orchestrator
"""

from .errors import (
    AlreadyConfiguredError,
    ConfigurationError,
    ResourceParseError,
    SyncError,
    TransportError,
)
from .localization import ComponentConfig, SyncConfig, SyncOrchestrator
from .runtime import BundleCache, DedupTracker, LocaleResolver, PlaceholderFormatter

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("l10nsync")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "AlreadyConfiguredError",
    "BundleCache",
    "ComponentConfig",
    "ConfigurationError",
    "DedupTracker",
    "LocaleResolver",
    "PlaceholderFormatter",
    "ResourceParseError",
    "SyncConfig",
    "SyncError",
    "SyncOrchestrator",
    "TransportError",
    "__version__",
]
