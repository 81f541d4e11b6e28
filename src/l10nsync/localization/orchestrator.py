"""Bundle synchronization orchestrator.

SyncOrchestrator drives startup: it decides between online and offline
loading, computes which (locale, component) pairs need data, loads each
pair at most once through its locale fallback chain, and serves reads
from the resulting cache.

Lifecycle:
    UNCONFIGURED -> CONFIGURING -> ONLINE_SYNC | OFFLINE_LOAD
                 -> STARTUP_LOADED (once, when load_on_startup) -> READY

Online startup:
    1. Brief info (remote locale and component lists) is fetched.
    2. Every remote locale x remote component pair passing the component
       allow-list becomes a LoadTask.
    3. The first task is loaded synchronously, so at least one bundle is
       ready before the concurrent phase starts.
    4. The remaining tasks run through the batch-then-barrier dispatcher.
    5. After the last barrier, components declared only locally are
       backfilled for every local locale on the calling thread.

Offline startup loads every declared component for each of its declared
locales, sequentially, in declaration order.

Per-pair loading probes the fallback chain in order; at each position the
remote bundle is tried first (online only), then the offline sources. The
first position that yields messages wins and probing stops. No merging
across fallback levels takes place.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from l10nsync.constants import INFO_COMPONENTS, INFO_LOCALES
from l10nsync.enums import LoadStatus, SyncState
from l10nsync.errors import AlreadyConfiguredError, ConfigurationError, SyncError
from l10nsync.locale_utils import locales_equal
from l10nsync.localization.context import get_current_locale
from l10nsync.localization.loading import (
    BundleLoadResult,
    LoadTask,
    OfflineLoader,
    PackageResourceReader,
    ParserRegistry,
    SyncSummary,
    list_external_components,
    list_external_locales,
)
from l10nsync.localization.release import KnownList, ReleaseInfo
from l10nsync.localization.transport import (
    HttpxTransport,
    RemoteApi,
    fetch_brief_info,
    fetch_remote_messages,
)
from l10nsync.runtime.batching import run_in_batches
from l10nsync.runtime.cache import BundleCache
from l10nsync.runtime.dedup import DedupKey, DedupTracker
from l10nsync.runtime.formatter import PlaceholderFormatter
from l10nsync.runtime.resolver import LocaleResolver

if TYPE_CHECKING:
    from l10nsync.localization.config import SyncConfig
    from l10nsync.localization.loading import ResourceReader
    from l10nsync.localization.types import ComponentName, LocaleCode, MessageKey, Messages
    from l10nsync.localization.transport import Transport
    from l10nsync.runtime.cache import ComponentMessages
    from l10nsync.runtime.plural_rules import Quantity

__all__ = ["SyncOrchestrator"]

logger = logging.getLogger(__name__)

_ORIGIN_REMOTE = "remote"
_ORIGIN_OFFLINE = "offline"


class SyncOrchestrator:
    """Resolves, caches and synchronizes message bundles for one release.

    Collaborators are passed in explicitly; nothing is looked up from
    global state.

    Example - Offline:
        >>> config = SyncConfig(
        ...     online=False,
        ...     external_resource_root="locales",
        ...     default_resource_format="bundle,external",
        ...     component_configs=(ComponentConfig("about", {"en": (), "de": ()}),),
        ... )
        >>> sync = SyncOrchestrator()
        >>> sync.configure(config)
        >>> sync.format("about", "greeting", "Anna", locale="de")
        'Hallo Anna'

    Example - Online:
        >>> sync = SyncOrchestrator(transport=HttpxTransport())
        >>> summary = sync.configure(SyncConfig(
        ...     product="shop", version="1.0.0",
        ...     online_service_url="https://l10n.example.com",
        ... ))
        >>> summary.loaded
        12
    """

    __slots__ = (
        "_api",
        "_cache",
        "_config",
        "_formatter",
        "_loaded_on_startup",
        "_local_components",
        "_offline",
        "_owns_transport",
        "_parsers",
        "_reader",
        "_release",
        "_resolver",
        "_startup_lock",
        "_state",
        "_state_lock",
        "_tracker",
        "_transport",
    )

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        parsers: ParserRegistry | None = None,
        reader: ResourceReader | None = None,
        formatter: PlaceholderFormatter | None = None,
    ) -> None:
        """Initialize an unconfigured orchestrator.

        Args:
            transport: Remote collaborator. An HttpxTransport is created on
                configure() when the config is online-capable and none is given.
            parsers: Parser registry; a registry with only the built-in
                readers is used when omitted
            reader: Resource reader; PackageResourceReader when omitted
            formatter: Placeholder formatter; default PlaceholderFormatter
        """
        self._transport = transport
        self._owns_transport = False
        self._parsers = parsers if parsers is not None else ParserRegistry()
        self._reader = reader
        self._formatter = formatter if formatter is not None else PlaceholderFormatter()

        self._state = SyncState.UNCONFIGURED
        self._state_lock = threading.Lock()
        self._startup_lock = threading.Lock()
        self._loaded_on_startup = False

        self._cache = BundleCache()
        self._tracker = DedupTracker()
        self._release = ReleaseInfo()

        self._config: SyncConfig | None = None
        self._resolver: LocaleResolver | None = None
        self._api: RemoteApi | None = None
        self._offline: OfflineLoader | None = None
        self._local_components: tuple[str, ...] | None = None

    @property
    def state(self) -> SyncState:
        """Current lifecycle state."""
        with self._state_lock:
            return self._state

    @property
    def config(self) -> SyncConfig:
        """Active configuration.

        Raises:
            ConfigurationError: If configure() has not been called
        """
        if self._config is None:
            msg = "Orchestrator is not configured"
            raise ConfigurationError(msg)
        return self._config

    @property
    def cache(self) -> BundleCache:
        """Bundle cache populated by this orchestrator."""
        return self._cache

    @property
    def release(self) -> ReleaseInfo:
        """Known local and remote locales and components."""
        return self._release

    @property
    def tracker(self) -> DedupTracker:
        """At-most-once load tracker."""
        return self._tracker

    @property
    def resolver(self) -> LocaleResolver:
        """Fallback chain resolver for the configured source locale."""
        if self._resolver is None:
            msg = "Orchestrator is not configured"
            raise ConfigurationError(msg)
        return self._resolver

    @property
    def formatter(self) -> PlaceholderFormatter:
        """Formatter used by format() and format_plural()."""
        return self._formatter

    @property
    def current_locale(self) -> str:
        """Locale used by reads that name none.

        Context locale first, then the configured default locale, then the
        source locale.
        """
        return get_current_locale() or self.config.default_locale or self.config.source_locale

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"SyncOrchestrator(state={self.state}, slots={len(self._cache)})"

    def _transition(self, state: SyncState) -> None:
        with self._state_lock:
            logger.info("State %s -> %s", self._state, state)
            self._state = state

    def configure(self, config: SyncConfig) -> SyncSummary | None:
        """Configure the orchestrator and run the startup synchronization.

        May be called once. The online path is taken when the config is
        online-capable, the offline path otherwise.

        Args:
            config: Release configuration

        Returns:
            Startup load summary, or None when load_on_startup is disabled

        Raises:
            AlreadyConfiguredError: If called more than once
        """
        with self._state_lock:
            if self._state is not SyncState.UNCONFIGURED:
                raise AlreadyConfiguredError(self._state)
            logger.info("State %s -> %s", self._state, SyncState.CONFIGURING)
            self._state = SyncState.CONFIGURING

        self._config = config
        self._resolver = LocaleResolver(config.source_locale)

        if config.is_online_supported:
            self._api = RemoteApi(config.online_service_url, config.product, config.version)
            if self._transport is None:
                self._transport = HttpxTransport()
                self._owns_transport = True
        if self._reader is None:
            self._reader = PackageResourceReader(self._transport, config.try_wait)
        self._offline = OfflineLoader(config, self._parsers, self._reader)

        self._init_local_scope()

        if config.is_online_supported:
            self._transition(SyncState.ONLINE_SYNC)
            self.fetch_brief_info()
            summary = self.check_load_on_startup(by_remote=True)
        else:
            self._transition(SyncState.OFFLINE_LOAD)
            summary = self.check_load_on_startup(by_remote=False)

        self._transition(SyncState.READY)
        return summary

    def close(self) -> None:
        """Close the transport if this orchestrator created it."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            self._transport.close()

    def __enter__(self) -> SyncOrchestrator:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def fetch_brief_info(self) -> bool:
        """Fetch remote locale and component lists into release.remote.

        Failed or rejected responses leave the lists unchanged.

        Returns:
            True if both lists were accepted
        """
        config = self.config
        if self._api is None or self._transport is None:
            return False
        locales_ok = fetch_brief_info(
            self._transport,
            self._api.locale_list_url(),
            INFO_LOCALES,
            self._release.remote.locales,
            timeout=config.try_wait,
        )
        components_ok = fetch_brief_info(
            self._transport,
            self._api.component_list_url(),
            INFO_COMPONENTS,
            self._release.remote.components,
            timeout=config.try_wait,
        )
        logger.info(
            "Brief info for %s/%s: %d locale(s), %d component(s)",
            config.product,
            config.version,
            len(self._release.remote.locales),
            len(self._release.remote.components),
        )
        return locales_ok and components_ok

    def check_load_on_startup(self, *, by_remote: bool) -> SyncSummary | None:
        """Load every bundle eagerly, at most once per orchestrator.

        Args:
            by_remote: Take the online path (True) or the offline path (False)

        Returns:
            Summary of the load, or None if startup loading is disabled or
            already happened
        """
        config = self.config
        with self._startup_lock:
            if self._loaded_on_startup or not config.load_on_startup:
                return None
            self._loaded_on_startup = True

        summary = self._load_remote_on_startup() if by_remote else self._load_local_on_startup()
        self._transition(SyncState.STARTUP_LOADED)
        logger.info("Startup load finished: %r", summary)
        return summary

    def _init_local_scope(self) -> None:
        components = self.local_components()
        self._release.local.components.extend(components)
        for component in components:
            self._release.local.locales.extend(self.component_locales(component))

    def local_components(self) -> tuple[str, ...]:
        """Locally declared components, from configuration or the external scan."""
        if self._local_components is None:
            config = self.config
            if config.component_list_from_external:
                names = list_external_components(config.external_resource_root)
            else:
                names = [component.name for component in config.component_configs]
            self._local_components = tuple(names)
        return self._local_components

    def component_locales(self, component: str) -> tuple[str, ...]:
        """Locales declared for a local component.

        Falls back to the external scan when the component declares no
        locales or when lists come from external declaration.
        """
        config = self.config
        declared = config.find_component(component)
        locales = list(declared.locales) if declared is not None else []
        if config.component_list_from_external or not locales:
            locales = list_external_locales(
                config.external_resource_root, component, config.source_locale
            )
        return tuple(locales)

    def plan_remote_tasks(self) -> list[LoadTask]:
        """Cross product of remote locales and allowed remote components."""
        config = self.config
        allowed = KnownList()
        allowed.extend(config.components)

        tasks: list[LoadTask] = []
        for locale in self._release.remote.locales:
            chain = self.resolver.chain(locale)
            for component in self._release.remote.components:
                if not config.components or component in allowed:
                    tasks.append(LoadTask(locale, component, chain))
        return tasks

    def _load_remote_on_startup(self) -> SyncSummary:
        tasks = self.plan_remote_tasks()
        results: list[BundleLoadResult] = []
        barriers = 0

        if tasks:
            results.append(self._run_task(tasks[0]))
            logger.debug(
                "Dispatching %d task(s) in batches of %d", len(tasks) - 1, self.config.batch_size
            )
            run = run_in_batches(tasks[1:], self._run_task, self.config.batch_size)
            results.extend(run.results)
            barriers = run.barriers

        for component in self._release.local_only_components():
            for locale in self._release.local.locales:
                results.append(self.load_bundle(locale, component, remote=False))

        return SyncSummary(tuple(results), barriers=barriers, by_remote=True)

    def _load_local_on_startup(self) -> SyncSummary:
        results = [
            self.load_bundle(locale, component, remote=False)
            for component in self.local_components()
            for locale in self.component_locales(component)
        ]
        return SyncSummary(tuple(results), by_remote=False)

    def _run_task(self, task: LoadTask) -> BundleLoadResult:
        return self._load_pair(task.locale, task.component, task.chain, remote=True)

    def load_bundle(
        self, locale: str, component: str, *, remote: bool | None = None
    ) -> BundleLoadResult:
        """Load one (locale, component) pair at most once.

        Args:
            locale: Requested locale
            component: Component name
            remote: Probe the service too; defaults to the config's online capability

        Returns:
            SKIPPED if the pair or its locale was already handled, otherwise
            LOADED, EMPTY or ERROR
        """
        use_remote = self.config.is_online_supported if remote is None else remote
        return self._load_pair(locale, component, self.resolver.chain(locale), remote=use_remote)

    def load_locale(self, locale: str) -> tuple[BundleLoadResult, ...]:
        """Load every local component for locale, then mark the whole locale handled."""
        if self._tracker.is_handled(locale):
            return ()
        results = tuple(
            self.load_bundle(locale, component, remote=False)
            for component in self.local_components()
        )
        self._tracker.mark_loaded(DedupKey.of(locale))
        return results

    def _load_pair(
        self, locale: str, component: str, chain: tuple[str, ...], *, remote: bool
    ) -> BundleLoadResult:
        if not self._tracker.claim(locale, component):
            return BundleLoadResult(locale, component, LoadStatus.SKIPPED)

        slot = self._cache.get_or_create(locale, component)
        try:
            for near_locale in chain:
                if remote and self._load_remote(slot, component, near_locale):
                    return self._loaded(slot, near_locale, _ORIGIN_REMOTE)
                if self._offline is not None and self._offline.load(slot, component, near_locale):
                    return self._loaded(slot, near_locale, _ORIGIN_OFFLINE)
        except (SyncError, OSError, ValueError) as e:
            logger.error("Loading %s/%s failed: %s", locale, component, e)
            return BundleLoadResult(locale, component, LoadStatus.ERROR, error=e)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.exception("Unexpected failure loading %s/%s", locale, component)
            return BundleLoadResult(locale, component, LoadStatus.ERROR, error=e)

        logger.debug("No data for %s/%s in chain %s", locale, component, chain)
        return BundleLoadResult(locale, component, LoadStatus.EMPTY)

    @staticmethod
    def _loaded(slot: ComponentMessages, near_locale: str, origin: str) -> BundleLoadResult:
        logger.debug(
            "Loaded %s/%s from %s (%s, %d key(s))",
            slot.locale,
            slot.component,
            near_locale,
            origin,
            slot.count(),
        )
        return BundleLoadResult(
            slot.locale,
            slot.component,
            LoadStatus.LOADED,
            resolved_locale=near_locale,
            origin=origin,
            message_count=slot.count(),
        )

    def _load_remote(self, slot: ComponentMessages, component: str, near_locale: str) -> bool:
        if self._api is None or self._transport is None:
            return False
        remote_locales = self._release.remote.locales
        if len(remote_locales) > 0 and near_locale not in remote_locales:
            return False
        messages = fetch_remote_messages(
            self._transport,
            self._api.translation_url(near_locale, component),
            timeout=self.config.try_wait,
        )
        if not messages:
            return False
        slot.update(messages)
        return True

    def _ensure_loaded(self, locale: str, component: str) -> ComponentMessages | None:
        if not self._tracker.is_handled(locale, component):
            self.load_bundle(locale, component)
        return self._cache.peek(locale, component)

    def get_string(
        self, component: ComponentName, key: MessageKey, locale: LocaleCode | None = None
    ) -> str | None:
        """Return the message for key, loading its bundle on first read.

        Falls back to the source locale's bundle when the key is missing.
        While another thread is still filling the requested bundle, the
        slot may be incomplete and the read can fall through to the
        source locale; reads issued after startup finishes see full slots.

        Args:
            component: Component name
            key: Message key
            locale: Requested locale; defaults to current_locale

        Returns:
            Message text, or None if no bundle has the key
        """
        requested = locale or self.current_locale
        candidates = [requested]
        if not locales_equal(requested, self.config.source_locale):
            candidates.append(self.config.source_locale)

        for candidate in candidates:
            slot = self._ensure_loaded(candidate, component)
            value = slot.get_string(key) if slot is not None else None
            if value is not None:
                return value
        return None

    def format(
        self, component: str, key: str, *args: object, locale: str | None = None
    ) -> str | None:
        """Return the message for key with positional placeholders substituted.

        Missing arguments leave their placeholders as literal text.
        """
        return self._formatter.format(self.get_string(component, key, locale), args)

    def format_plural(
        self, component: str, key: str, quantity: Quantity, locale: str | None = None
    ) -> str | None:
        """Return the pluralized rendering of the message for key."""
        requested = locale or self.current_locale
        template = self.get_string(component, key, requested)
        return self._formatter.format_plural(template, quantity, requested)

    def get_locale_messages(self, locale: LocaleCode) -> dict[ComponentName, Messages]:
        """Messages of every loaded component for locale, keyed by component."""
        if not self._loaded_on_startup:
            self.load_locale(locale)
        return {
            component: slot.as_dict()
            for component, slot in self._cache.components_for(locale).items()
        }

    def get_all_locale_messages(self) -> dict[LocaleCode, dict[ComponentName, Messages]]:
        """Messages of every known locale that has at least one loaded component."""
        all_messages: dict[LocaleCode, dict[ComponentName, Messages]] = {}
        for locale in self._release.all_locales():
            messages = self.get_locale_messages(locale)
            if messages:
                all_messages[locale] = messages
        return all_messages
