"""Offline resource loading infrastructure.

Provides the parser protocol and registry, storage descriptor parsing,
path template rendering, the resource reader protocol with its default
implementation, and the result types recorded for every load attempt.

Offline sources are described per (component, locale) by zero or more
storage descriptors, each a comma-separated triple:

    path-template,parserName,storeType

Missing trailing fields fall back to the configured default resource
format. Path templates accept {component}, {locale} (locale suffix),
{locale_tag} (bare locale) and the {no_locale} sentinel, which expands to
the component's canonical path "<component>/messages{_locale}.<ext>".

Components:
    ResourceParser - Protocol for decoding resource text into messages
    ParserRegistry - Explicit registry of named parsers, with built-ins
    StorageDescriptor - Parsed "path,parser,store" triple
    ResourceReader - Protocol for reading internal and external resources
    PackageResourceReader - importlib.resources / filesystem / HTTP reader
    OfflineLoader - Applies descriptors to fill one cache slot
    LoadTask, BundleLoadResult, SyncSummary - Load bookkeeping
"""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from l10nsync.constants import (
    CANONICAL_FILE_STEM,
    KEY_MESSAGES,
    PLACE_COMPONENT,
    PLACE_LOCALE,
    PLACE_LOCALE_TAG,
    PLACE_NO_LOCALE,
)
from l10nsync.enums import LoadStatus, ResourceFormat, StoreType
from l10nsync.errors import ResourceParseError, TransportError
from l10nsync.locale_utils import locale_suffix, locales_equal

if TYPE_CHECKING:
    from collections.abc import Mapping

    from l10nsync.localization.config import SyncConfig
    from l10nsync.localization.transport import Transport
    from l10nsync.runtime.cache import ComponentMessages

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Parsers
    "ResourceParser",
    "JsonBundleParser",
    "PropertiesParser",
    "ParserRegistry",
    # Descriptors and paths
    "StorageDescriptor",
    "render_path_template",
    "resolve_resource_path",
    "join_external_path",
    # Readers
    "ResourceReader",
    "PackageResourceReader",
    "list_external_components",
    "list_external_locales",
    # Loader
    "OfflineLoader",
    # Bookkeeping
    "LoadTask",
    "BundleLoadResult",
    "SyncSummary",
]

logger = logging.getLogger(__name__)


# ============================================================================
# PARSERS
# ============================================================================


class ResourceParser(Protocol):
    """Protocol for decoding resource text into key/value messages.

    Implementations raise ResourceParseError on malformed input.
    """

    def parse(self, text: str) -> Mapping[str, object]:
        """Decode resource text."""


class JsonBundleParser:
    """Decodes JSON bundles.

    Accepts a bundle document ({"component": ..., "messages": {...}}) or a
    flat object of key/value pairs.
    """

    __slots__ = ()

    def parse(self, text: str) -> Mapping[str, object]:
        """Decode a JSON bundle.

        Raises:
            ResourceParseError: If text is not a JSON object
        """
        try:
            document = json.loads(text)
        except (ValueError, RecursionError) as e:
            msg = f"Invalid JSON bundle: {e}"
            raise ResourceParseError(msg, parser_name=ResourceFormat.BUNDLE) from e
        if not isinstance(document, dict):
            msg = f"JSON bundle must be an object, got {type(document).__name__}"
            raise ResourceParseError(msg, parser_name=ResourceFormat.BUNDLE)
        messages = document.get(KEY_MESSAGES, document)
        if not isinstance(messages, dict):
            msg = "JSON bundle 'messages' must be an object"
            raise ResourceParseError(msg, parser_name=ResourceFormat.BUNDLE)
        return messages


_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")
_SIMPLE_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class PropertiesParser:
    """Decodes Java-style .properties text.

    Supports "key=value", "key: value" and "key value" lines, '#' and '!'
    comments, backslash line continuation and \\uXXXX escapes.
    """

    __slots__ = ()

    @staticmethod
    def _logical_lines(text: str) -> list[str]:
        lines: list[str] = []
        pending = ""
        for raw in text.splitlines():
            line = raw.strip()
            if not pending and (not line or line[0] in "#!"):
                continue
            trailing = len(line) - len(line.rstrip("\\"))
            if trailing % 2 == 1:
                pending += line[:-1]
                continue
            lines.append(pending + line)
            pending = ""
        if pending:
            lines.append(pending)
        return lines

    @staticmethod
    def _unescape(value: str) -> str:
        value = _UNICODE_ESCAPE.sub(lambda match: chr(int(match[1], 16)), value)
        out: list[str] = []
        chars = iter(value)
        for char in chars:
            if char == "\\":
                following = next(chars, "")
                out.append(_SIMPLE_ESCAPES.get(following, following))
            else:
                out.append(char)
        return "".join(out)

    def parse(self, text: str) -> Mapping[str, object]:
        """Decode properties text into a dict."""
        messages: dict[str, object] = {}
        for line in self._logical_lines(text):
            index = 0
            while index < len(line):
                char = line[index]
                if char == "\\":
                    index += 2
                    continue
                if char in "=: \t":
                    break
                index += 1
            key = line[:index]
            rest = line[index:].lstrip(" \t")
            if rest[:1] in ("=", ":"):
                rest = rest[1:].lstrip(" \t")
            messages[self._unescape(key)] = self._unescape(rest)
        return messages


_BUILTIN_PARSERS: dict[str, ResourceParser] = {
    ResourceFormat.BUNDLE: JsonBundleParser(),
    ResourceFormat.PROPERTIES: PropertiesParser(),
}


class ParserRegistry:
    """Explicit registry of named resource parsers.

    Constructed once by the application and handed to the orchestrator;
    there is no process-global registry. Custom registrations shadow the
    built-in "bundle" and "properties" readers.

    Example:
        >>> registry = ParserRegistry()
        >>> registry.register("yaml", YamlParser())
        >>> registry.resolve("bundle")  # built-in
        <l10nsync.localization.loading.JsonBundleParser object at ...>
    """

    __slots__ = ("_lock", "_parsers")

    def __init__(self) -> None:
        self._parsers: dict[str, ResourceParser] = {}
        self._lock = threading.Lock()

    def register(self, name: str, parser: ResourceParser) -> None:
        """Register parser under name, replacing any previous registration."""
        with self._lock:
            self._parsers[name.strip().lower()] = parser

    def get(self, name: str) -> ResourceParser | None:
        """Return the custom parser registered under name, if any."""
        with self._lock:
            return self._parsers.get(name.strip().lower())

    def resolve(self, name: str) -> ResourceParser | None:
        """Return the custom parser for name, else the built-in reader, else None."""
        parser = self.get(name)
        if parser is None:
            parser = _BUILTIN_PARSERS.get(name.strip().lower())
        return parser

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None


# ============================================================================
# DESCRIPTORS AND PATHS
# ============================================================================


@dataclass(frozen=True, slots=True)
class StorageDescriptor:
    """Parsed offline storage descriptor.

    Attributes:
        path: Path template
        parser_name: Name of the parser decoding the resource
        store_type: "internal" or "external"
    """

    path: str
    parser_name: str
    store_type: str

    @classmethod
    def parse(
        cls, descriptor: str, *, default_parser: str, default_store_type: str
    ) -> StorageDescriptor:
        """Parse "path,parserName,storeType", filling missing fields with defaults.

        Example:
            >>> StorageDescriptor.parse("{no_locale}", default_parser="bundle",
            ...                         default_store_type="external")
            StorageDescriptor(path='{no_locale}', parser_name='bundle', store_type='external')
        """
        parts = [part.strip() for part in descriptor.split(",")]
        path = parts[0] if parts[0] else PLACE_NO_LOCALE
        parser_name = parts[1] if len(parts) > 1 and parts[1] else default_parser
        store_type = parts[2] if len(parts) > 2 and parts[2] else default_store_type
        return cls(path, parser_name, store_type.lower())


def render_path_template(
    template: str, component: str, locale: str, source_locale: str
) -> str:
    """Substitute {component}, {locale} (suffix) and {locale_tag} in template.

    Example:
        >>> render_path_template("{component}/messages{locale}.json", "foo", "de", "en")
        'foo/messages_de.json'
        >>> render_path_template("{component}/messages{locale}.json", "foo", "en", "en")
        'foo/messages.json'
    """
    path = template.replace(PLACE_COMPONENT, component)
    path = path.replace(PLACE_LOCALE_TAG, locale)
    return path.replace(PLACE_LOCALE, locale_suffix(locale, source_locale))


def resolve_resource_path(
    template: str,
    component: str,
    locale: str,
    source_locale: str,
    parser_name: str,
) -> str | None:
    """Render template, expanding the {no_locale} sentinel to the canonical path.

    Returns:
        Resource path, or None when the sentinel is used with a parser that
        has no canonical file convention
    """
    path = render_path_template(template, component, locale, source_locale)
    if PLACE_NO_LOCALE not in path:
        return path

    try:
        extension = ResourceFormat(parser_name.strip().lower()).extension
    except ValueError:
        return None
    suffix = locale_suffix(locale, source_locale)
    path = path.replace(PLACE_NO_LOCALE, component)
    return f"{path}/{CANONICAL_FILE_STEM}{suffix}.{extension}"


def join_external_path(root: str, path: str) -> str:
    """Join the external resource root and a relative resource path."""
    if not root:
        return path
    if root.endswith(("/", "\\")) or path.startswith(("/", "\\")):
        return root + path
    return f"{root}/{path}"


def _is_http(path: str) -> bool:
    return path.lower().startswith(("http://", "https://"))


# ============================================================================
# READERS
# ============================================================================


class ResourceReader(Protocol):
    """Protocol for reading raw resource text.

    Both methods return None when the resource does not exist.
    """

    def read_internal(self, root: str, path: str) -> str | None:
        """Read an embedded resource relative to an importable package."""

    def read_external(self, path: str) -> str | None:
        """Read a file path or an HTTP(S) URL."""


class PackageResourceReader:
    """Default ResourceReader.

    Internal resources are package data read through importlib.resources.
    External resources are files, or URLs read through the transport.

    Attributes:
        transport: Remote collaborator for HTTP(S) paths (None disables them)
        timeout: Per-request timeout forwarded to the transport
    """

    __slots__ = ("timeout", "transport")

    def __init__(self, transport: Transport | None = None, timeout: float = 3.0) -> None:
        self.transport = transport
        self.timeout = timeout

    def read_internal(self, root: str, path: str) -> str | None:
        """Read package data; None if the package or file does not exist."""
        try:
            resource = resources.files(root).joinpath(*path.strip("/").split("/"))
            return resource.read_text(encoding="utf-8")
        except (FileNotFoundError, ModuleNotFoundError, IsADirectoryError):
            return None

    def read_external(self, path: str) -> str | None:
        """Read a file or URL; None if the file does not exist.

        Raises:
            TransportError: If an HTTP(S) read fails
            OSError: If an existing file cannot be read
        """
        if _is_http(path):
            if self.transport is None:
                logger.warning("No transport configured for %s", path)
                return None
            return self.transport.get_text(path, timeout=self.timeout)
        try:
            return Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None


_CANONICAL_FILE = re.compile(
    rf"^{CANONICAL_FILE_STEM}(?:_(?P<locale>[^.]+))?\.(?:json|properties)$"
)


def list_external_components(root: str) -> list[str]:
    """Components declared externally: subdirectories of the external root."""
    if not root or _is_http(root):
        return []
    base = Path(root)
    if not base.is_dir():
        return []
    return sorted(entry.name for entry in base.iterdir() if entry.is_dir())


def list_external_locales(root: str, component: str, source_locale: str) -> list[str]:
    """Locales declared externally for a component, from its canonical file names.

    "messages.json" declares the source locale; "messages_de.json" declares "de".
    """
    if not root or _is_http(root):
        return []
    directory = Path(root) / component
    if not directory.is_dir():
        return []
    locales: list[str] = []
    for entry in sorted(directory.iterdir()):
        match = _CANONICAL_FILE.match(entry.name)
        if match is None:
            continue
        locale = match["locale"] or source_locale
        if not any(locales_equal(locale, known) for known in locales):
            locales.append(locale)
    return locales


# ============================================================================
# LOADER
# ============================================================================


class OfflineLoader:
    """Fills a cache slot from the offline sources of one near-locale.

    Holds no state of its own beyond its collaborators; safe to share
    between load workers.
    """

    __slots__ = ("_config", "_parsers", "_reader")

    def __init__(
        self, config: SyncConfig, parsers: ParserRegistry, reader: ResourceReader
    ) -> None:
        self._config = config
        self._parsers = parsers
        self._reader = reader

    def descriptors(self, component: str, locale: str) -> list[StorageDescriptor]:
        """Storage descriptors for (component, locale).

        Undeclared pairs, and declared locales with no descriptors, use the
        canonical path sentinel with the default format.
        """
        declared = self._config.find_component(component)
        raw = declared.descriptors_for(locale) if declared is not None else None
        entries = raw if raw else (PLACE_NO_LOCALE,)
        return [
            StorageDescriptor.parse(
                entry,
                default_parser=self._config.default_parser,
                default_store_type=self._config.default_store_type,
            )
            for entry in entries
        ]

    def load(self, slot: ComponentMessages, component: str, near_locale: str) -> int:
        """Apply the descriptors of (component, slot.locale) to slot, rendered for near_locale.

        Descriptors come from the requested locale's declaration; their
        path templates are filled with the chain position being probed.

        Args:
            slot: Target cache slot, exclusively owned by the caller
            component: Component name
            near_locale: Chain position whose files are read

        Returns:
            Message count of the slot after loading
        """
        for descriptor in self.descriptors(component, slot.locale):
            path = resolve_resource_path(
                descriptor.path,
                component,
                near_locale,
                self._config.source_locale,
                descriptor.parser_name,
            )
            if path is None:
                continue
            if descriptor.store_type == StoreType.INTERNAL:
                self._load_internal(slot, path, descriptor.parser_name)
            elif descriptor.store_type == StoreType.EXTERNAL:
                self._load_external(slot, path, descriptor.parser_name)
            else:
                logger.warning("Unknown store type '%s' for %s", descriptor.store_type, path)
        return slot.count()

    def _parse_into(
        self, slot: ComponentMessages, text: str | None, parser: ResourceParser, path: str
    ) -> bool:
        if text is None:
            logger.debug("No resource at %s", path)
            return False
        try:
            messages = parser.parse(text)
        except ResourceParseError as e:
            logger.warning("Failed to parse %s: %s", path, e)
            return False
        slot.update(messages)
        logger.debug("Loaded %d message(s) from %s", len(messages), path)
        return True

    def _load_internal(self, slot: ComponentMessages, path: str, parser_name: str) -> None:
        root = self._config.internal_resource_root
        parser = self._parsers.resolve(parser_name)
        if not root or parser is None:
            logger.debug(
                "Internal resource %s skipped (root=%r, parser=%s)", path, root, parser_name
            )
            return
        self._parse_into(slot, self._reader.read_internal(root, path), parser, path)

    def _load_external(self, slot: ComponentMessages, path: str, parser_name: str) -> None:
        parser = self._parsers.resolve(parser_name)
        if parser is None:
            logger.debug("External resource %s skipped: no parser '%s'", path, parser_name)
            return
        full_path = join_external_path(self._config.external_resource_root, path)
        try:
            text = self._reader.read_external(full_path)
        except (OSError, TransportError) as e:
            logger.warning("Cannot read %s: %s", full_path, e)
            return
        loaded = self._parse_into(slot, text, parser, full_path)
        if loaded and parser_name.strip().lower() == ResourceFormat.BUNDLE:
            slot.resource_path = full_path
            slot.resource_type = parser_name


# ============================================================================
# BOOKKEEPING
# ============================================================================


@dataclass(frozen=True, slots=True)
class LoadTask:
    """One pending (locale, component) fetch.

    Attributes:
        locale: Requested locale; names the cache slot
        component: Component name
        chain: Fallback chain probed for the locale
    """

    locale: str
    component: str
    chain: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class BundleLoadResult:
    """Outcome of loading one (locale, component) pair.

    Attributes:
        locale: Requested locale
        component: Component name
        status: LOADED, EMPTY, SKIPPED or ERROR
        resolved_locale: Chain position that yielded the data
        origin: "remote" or "offline" when loaded
        message_count: Keys in the slot after loading
        error: Exception recorded for ERROR results
    """

    locale: str
    component: str
    status: LoadStatus
    resolved_locale: str | None = None
    origin: str | None = None
    message_count: int = 0
    error: Exception | None = None

    @property
    def is_loaded(self) -> bool:
        """Check if a near-locale yielded data."""
        return self.status == LoadStatus.LOADED

    @property
    def is_fallback(self) -> bool:
        """Check if the data came from a less specific locale than requested."""
        return self.resolved_locale is not None and not locales_equal(
            self.resolved_locale, self.locale
        )


@dataclass(frozen=True, slots=True)
class SyncSummary:
    """Immutable aggregate of a startup load.

    Attributes:
        results: Individual pair results, in execution order
        barriers: Batch barriers waited on during the concurrent phase
        by_remote: True for the online path, False for the offline path
    """

    results: tuple[BundleLoadResult, ...]
    barriers: int = 0
    by_remote: bool = False

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"SyncSummary(total={len(self.results)}, loaded={self.loaded}, "
            f"empty={self.empty}, skipped={self.skipped}, errors={self.errors}, "
            f"barriers={self.barriers}, by_remote={self.by_remote})"
        )

    def _count(self, status: LoadStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def loaded(self) -> int:
        """Number of pairs that yielded data."""
        return self._count(LoadStatus.LOADED)

    @property
    def empty(self) -> int:
        """Number of pairs with no data anywhere in their chain."""
        return self._count(LoadStatus.EMPTY)

    @property
    def skipped(self) -> int:
        """Number of pairs already handled before this load."""
        return self._count(LoadStatus.SKIPPED)

    @property
    def errors(self) -> int:
        """Number of pairs that failed unexpectedly."""
        return self._count(LoadStatus.ERROR)

    def get_by_status(self, status: LoadStatus) -> tuple[BundleLoadResult, ...]:
        """Get all results with the given status."""
        return tuple(r for r in self.results if r.status == status)

    def get_by_component(self, component: str) -> tuple[BundleLoadResult, ...]:
        """Get all results for a component (case-insensitive)."""
        wanted = component.lower()
        return tuple(r for r in self.results if r.component.lower() == wanted)
