"""Pytest configuration for the l10nsync test suite.

Single Source of Truth for Hypothesis max_examples:
- dev: Local development with 200 examples (thorough property testing)
- ci: CI runs with 50 examples (fast feedback)
- verbose: Debug mode with progress output (100 examples)

Profile auto-detection:
- HYPOTHESIS_PROFILE env var -> explicit override
- CI=true environment variable -> "ci" profile
- Otherwise -> "dev" profile

Override manually: HYPOTHESIS_PROFILE=verbose pytest tests/

Shared fixtures build offline resource trees and fake remote services so
orchestrator tests never touch the network.
"""

from __future__ import annotations

import json
import os
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest
from hypothesis import HealthCheck, Phase, Verbosity, settings

from l10nsync.errors import TransportError

# =============================================================================
# HYPOTHESIS PROFILES - SINGLE SOURCE OF TRUTH
# =============================================================================

settings.register_profile(
    "dev",
    max_examples=200,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

settings.register_profile(
    "ci",
    max_examples=50,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=True,
    print_blob=True,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

settings.register_profile(
    "verbose",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    verbosity=Verbosity.verbose,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


def _detect_profile() -> str:
    """Detect appropriate Hypothesis profile based on execution context.

    Priority:
    1. HYPOTHESIS_PROFILE env var (explicit override)
    2. CI=true env var
    3. Default to "dev"
    """
    explicit = os.environ.get("HYPOTHESIS_PROFILE")
    if explicit in ("dev", "ci", "verbose"):
        return explicit
    if os.environ.get("CI") == "true":
        return "ci"
    return "dev"


settings.load_profile(_detect_profile())


# =============================================================================
# FAKE REMOTE SERVICE
# =============================================================================


def envelope(data: Mapping[str, Any], code: int = 200) -> dict[str, Any]:
    """Wrap data in the service response envelope."""
    return {"response": {"code": code}, "result": {"data": dict(data)}}


class FakeTransport:
    """In-memory Transport keyed by URL suffix.

    Unknown URLs raise TransportError, like a 404 would. Every request is
    recorded, so tests can count fetches per URL.
    """

    def __init__(self, routes: Mapping[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.requests: list[str] = []
        self._lock = threading.Lock()

    def _lookup(self, url: str) -> Any:
        with self._lock:
            self.requests.append(url)
        for suffix, document in self.routes.items():
            if url.endswith(suffix):
                return document
        msg = f"GET {url} failed: 404"
        raise TransportError(msg, url=url)

    def get_json(self, url: str, *, timeout: float) -> Any:
        return self._lookup(url)

    def get_text(self, url: str, *, timeout: float) -> str:
        document = self._lookup(url)
        return document if isinstance(document, str) else json.dumps(document)

    def count(self, fragment: str) -> int:
        with self._lock:
            return sum(1 for url in self.requests if fragment in url)


def remote_routes(
    locales: list[str],
    components: list[str],
    bundles: Mapping[tuple[str, str], Mapping[str, str]],
) -> dict[str, Any]:
    """Routes for a service declaring locales and components, serving bundles."""
    routes: dict[str, Any] = {
        "/localelist": envelope({"locales": locales}),
        "/componentlist": envelope({"components": components}),
    }
    for (locale, component), messages in bundles.items():
        routes[f"/locales/{locale}/components/{component}"] = envelope(
            {"messages": dict(messages)}
        )
    return routes


@pytest.fixture
def fake_transport_factory() -> Callable[..., FakeTransport]:
    """Factory building a FakeTransport from remote_routes() arguments."""

    def factory(
        locales: list[str],
        components: list[str],
        bundles: Mapping[tuple[str, str], Mapping[str, str]] | None = None,
    ) -> FakeTransport:
        return FakeTransport(remote_routes(locales, components, bundles or {}))

    return factory


# =============================================================================
# OFFLINE RESOURCE TREES
# =============================================================================


def write_bundle(root: Path, component: str, suffix: str, messages: Mapping[str, str]) -> Path:
    """Write <root>/<component>/messages<suffix>.json in bundle format."""
    directory = root / component
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"messages{suffix}.json"
    path.write_text(
        json.dumps({"component": component, "messages": dict(messages)}), encoding="utf-8"
    )
    return path


@pytest.fixture
def external_root(tmp_path: Path) -> Path:
    """External resource tree with 'about' (en, de, fr) and 'settings' (en, de)."""
    root = tmp_path / "locales"
    write_bundle(root, "about", "", {"title": "About", "greeting": "Hello {0}"})
    write_bundle(root, "about", "_de", {"title": "Über", "greeting": "Hallo {0}"})
    write_bundle(root, "about", "_fr", {"title": "À propos"})
    write_bundle(root, "settings", "", {"save": "Save", "files": "one{# file} other{# files}"})
    write_bundle(root, "settings", "_de", {"save": "Speichern"})
    return root


class RecordingReader:
    """ResourceReader serving fixed texts and recording every read."""

    def __init__(
        self,
        internal: Mapping[str, str] | None = None,
        external: Mapping[str, str] | None = None,
        fail: set[str] | None = None,
    ) -> None:
        self.internal = dict(internal or {})
        self.external = dict(external or {})
        self.fail = fail or set()
        self.reads: list[str] = []
        self._lock = threading.Lock()

    def _record(self, path: str) -> None:
        with self._lock:
            self.reads.append(path)

    def read_internal(self, root: str, path: str) -> str | None:
        self._record(f"{root}:{path}")
        return self.internal.get(path)

    def read_external(self, path: str) -> str | None:
        self._record(path)
        if path in self.fail:
            msg = "boom"
            raise TransportError(msg, url=path)
        return self.external.get(path)

