"""Configuration consumed by the synchronization core.

Configuration loading (YAML, JSON, environment) happens outside this
library; callers build a SyncConfig directly or hand an already-decoded
mapping to SyncConfig.from_mapping().
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any

from l10nsync.constants import (
    DEFAULT_RESOURCE_FORMAT,
    DEFAULT_SOURCE_LOCALE,
    DEFAULT_TRY_WAIT,
    default_batch_size,
)
from l10nsync.enums import StoreType
from l10nsync.errors import ConfigurationError
from l10nsync.locale_utils import normalize_locale

__all__ = ["ComponentConfig", "SyncConfig"]


@dataclass(frozen=True, slots=True)
class ComponentConfig:
    """A locally declared component and its offline resources.

    Attributes:
        name: Component name
        locales: Locale -> storage descriptors ("path,parserName,storeType").
            An empty descriptor tuple means "use the canonical path".

    Example:
        >>> ComponentConfig("about", {"en": ("about/messages{locale}.json",), "de": ()})
    """

    name: str
    locales: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze the locale mapping.

        Raises:
            ConfigurationError: If name is blank
        """
        if not self.name.strip():
            msg = "Component name cannot be empty"
            raise ConfigurationError(msg)
        frozen = {
            locale: (descriptors,) if isinstance(descriptors, str) else tuple(descriptors)
            for locale, descriptors in self.locales.items()
        }
        object.__setattr__(self, "locales", MappingProxyType(frozen))

    def descriptors_for(self, locale: str) -> tuple[str, ...] | None:
        """Return storage descriptors declared for locale, or None if undeclared."""
        wanted = normalize_locale(locale)
        for declared, descriptors in self.locales.items():
            if normalize_locale(declared) == wanted:
                return descriptors
        return None


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Immutable configuration for SyncOrchestrator.

    Attributes:
        product: Product name used in remote URLs
        version: Release version used in remote URLs
        online_service_url: Base URL of the translation service
        online: Online-capability flag
        load_on_startup: Load every bundle eagerly during configure()
        source_locale: Authoritative locale, final fallback of every chain
        default_locale: Locale used when no current locale is set
        components: Remote sync allow-list; empty means all components
        component_configs: Locally declared components and their resources
        component_list_from_external: Discover local components and locales
            by scanning external_resource_root
        default_resource_format: "parserName,storeType" filling missing
            descriptor fields
        try_wait: Per-request timeout in seconds, forwarded to the transport
        internal_resource_root: Importable package holding embedded resources
        external_resource_root: Directory or URL prefix for external resources
        max_workers: Batch size for concurrent loading (None: 2 x CPU count)

    Example:
        >>> config = SyncConfig(
        ...     product="shop",
        ...     version="1.0.0",
        ...     online_service_url="https://l10n.example.com",
        ...     component_configs=(ComponentConfig("about", {"en": (), "de": ()}),),
        ... )
        >>> config.is_online_supported
        True
    """

    product: str = ""
    version: str = ""
    online_service_url: str = ""
    online: bool = True
    load_on_startup: bool = True
    source_locale: str = DEFAULT_SOURCE_LOCALE
    default_locale: str = ""
    components: tuple[str, ...] = ()
    component_configs: tuple[ComponentConfig, ...] = ()
    component_list_from_external: bool = False
    default_resource_format: str = DEFAULT_RESOURCE_FORMAT
    try_wait: float = DEFAULT_TRY_WAIT
    internal_resource_root: str = ""
    external_resource_root: str = ""
    max_workers: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ConfigurationError: If any value is out of range or malformed
        """
        if not self.source_locale or self.source_locale.strip() != self.source_locale:
            msg = f"source_locale must be a non-empty locale code, got {self.source_locale!r}"
            raise ConfigurationError(msg)
        if self.try_wait <= 0:
            msg = "try_wait must be positive"
            raise ConfigurationError(msg)
        if self.max_workers is not None and self.max_workers <= 0:
            msg = "max_workers must be positive"
            raise ConfigurationError(msg)

        parts = [part.strip() for part in self.default_resource_format.split(",")]
        if not 1 <= len(parts) <= 2 or not parts[0]:
            msg = (
                "default_resource_format must be 'parserName' or 'parserName,storeType', "
                f"got {self.default_resource_format!r}"
            )
            raise ConfigurationError(msg)
        if len(parts) == 2 and parts[1] not in tuple(StoreType):
            msg = f"Unknown store type in default_resource_format: {parts[1]!r}"
            raise ConfigurationError(msg)

        object.__setattr__(self, "components", tuple(self.components))
        object.__setattr__(self, "component_configs", tuple(self.component_configs))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> SyncConfig:
        """Build a config from an already-decoded mapping.

        Keys use the attribute names. "component_configs" may be given as a
        mapping of component name -> {locale: descriptors}.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            msg = f"Unknown configuration option(s): {', '.join(unknown)}"
            raise ConfigurationError(msg)

        values = dict(mapping)
        declared = values.get("component_configs")
        if isinstance(declared, Mapping):
            values["component_configs"] = tuple(
                ComponentConfig(name, locales or {}) for name, locales in declared.items()
            )
        if isinstance(values.get("components"), str):
            values["components"] = (values["components"],)
        return cls(**values)

    @property
    def is_online_supported(self) -> bool:
        """True when the online flag is set and a service URL is configured."""
        return self.online and bool(self.online_service_url)

    @property
    def batch_size(self) -> int:
        """Number of load tasks dispatched per batch."""
        return self.max_workers if self.max_workers is not None else default_batch_size()

    @property
    def default_parser(self) -> str:
        """Parser name used when a descriptor omits it."""
        return self.default_resource_format.split(",")[0].strip()

    @property
    def default_store_type(self) -> str:
        """Store type used when a descriptor omits it."""
        parts = self.default_resource_format.split(",")
        return parts[1].strip() if len(parts) > 1 else StoreType.INTERNAL

    def find_component(self, name: str) -> ComponentConfig | None:
        """Return the declared component named name (case-insensitive)."""
        wanted = name.strip().lower()
        for component in self.component_configs:
            if component.name.strip().lower() == wanted:
                return component
        return None
