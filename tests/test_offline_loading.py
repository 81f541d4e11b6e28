"""Tests for offline resource loading: readers, declaration scans, OfflineLoader.

Python 3.13+.
"""

from __future__ import annotations

import uuid
from pathlib import Path

import pytest
from conftest import RecordingReader, write_bundle

from l10nsync.localization.config import ComponentConfig, SyncConfig
from l10nsync.localization.loading import (
    OfflineLoader,
    PackageResourceReader,
    ParserRegistry,
    StorageDescriptor,
    list_external_components,
    list_external_locales,
)
from l10nsync.runtime.cache import ComponentMessages


def offline_config(**overrides: object) -> SyncConfig:
    values: dict[str, object] = {"online": False, "default_resource_format": "bundle,external"}
    values.update(overrides)
    return SyncConfig.from_mapping(values)


@pytest.fixture
def internal_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[str, Path]:
    """Importable package holding embedded resources; returns (name, directory)."""
    name = f"l10n_res_{uuid.uuid4().hex}"
    package = tmp_path / "site" / name
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path / "site"))
    return name, package


class TestPackageResourceReader:
    def test_read_internal(self, internal_package: tuple[str, Path]) -> None:
        name, package = internal_package
        write_bundle(package, "about", "_de", {"title": "Über"})
        text = PackageResourceReader().read_internal(name, "about/messages_de.json")
        assert text is not None
        assert "Über" in text

    def test_read_internal_missing_file(self, internal_package: tuple[str, Path]) -> None:
        name, _ = internal_package
        assert PackageResourceReader().read_internal(name, "about/messages_xx.json") is None

    def test_read_internal_missing_package(self) -> None:
        assert PackageResourceReader().read_internal("no_such_pkg_l10nsync", "a.json") is None

    def test_read_external_file(self, external_root: Path) -> None:
        text = PackageResourceReader().read_external(str(external_root / "about/messages.json"))
        assert text is not None
        assert "About" in text

    def test_read_external_missing(self, tmp_path: Path) -> None:
        assert PackageResourceReader().read_external(str(tmp_path / "nope.json")) is None

    def test_read_external_url_through_transport(self, fake_transport_factory) -> None:
        transport = fake_transport_factory([], [])
        transport.routes["/cdn/about.json"] = '{"title": "About"}'
        reader = PackageResourceReader(transport, timeout=1.0)
        assert reader.read_external("https://example.com/cdn/about.json") == '{"title": "About"}'

    def test_read_external_url_without_transport(self) -> None:
        assert PackageResourceReader().read_external("https://example.com/a.json") is None


class TestExternalDeclarationScan:
    def test_components(self, external_root: Path) -> None:
        (external_root / "stray.txt").write_text("x", encoding="utf-8")
        assert list_external_components(str(external_root)) == ["about", "settings"]

    def test_locales(self, external_root: Path) -> None:
        assert list_external_locales(str(external_root), "about", "en") == ["en", "de", "fr"]

    def test_properties_files_declare_locales(self, tmp_path: Path) -> None:
        (tmp_path / "about").mkdir()
        (tmp_path / "about" / "messages_ja.properties").write_text("a=b", encoding="utf-8")
        (tmp_path / "about" / "readme.md").write_text("", encoding="utf-8")
        assert list_external_locales(str(tmp_path), "about", "en") == ["ja"]

    def test_missing_root(self, tmp_path: Path) -> None:
        assert list_external_components(str(tmp_path / "missing")) == []
        assert list_external_components("") == []
        assert list_external_locales(str(tmp_path), "missing", "en") == []


class TestOfflineLoaderDescriptors:
    def test_undeclared_pair_uses_sentinel(self) -> None:
        loader = OfflineLoader(offline_config(), ParserRegistry(), RecordingReader())
        assert loader.descriptors("about", "de") == [
            StorageDescriptor("{no_locale}", "bundle", "external")
        ]

    def test_declared_descriptors(self) -> None:
        config = offline_config(
            component_configs=(
                ComponentConfig(
                    "about",
                    {"de": ("a/{locale_tag}.properties,properties", "b/{component}.json")},
                ),
            )
        )
        loader = OfflineLoader(config, ParserRegistry(), RecordingReader())
        assert loader.descriptors("ABOUT", "DE") == [
            StorageDescriptor("a/{locale_tag}.properties", "properties", "external"),
            StorageDescriptor("b/{component}.json", "bundle", "external"),
        ]

    def test_declared_locale_without_descriptors(self) -> None:
        config = offline_config(component_configs=(ComponentConfig("about", {"de": ()}),))
        loader = OfflineLoader(config, ParserRegistry(), RecordingReader())
        assert loader.descriptors("about", "de")[0].path == "{no_locale}"


class TestOfflineLoaderLoad:
    def test_external_bundle(self, external_root: Path) -> None:
        config = offline_config(external_resource_root=str(external_root))
        loader = OfflineLoader(config, ParserRegistry(), PackageResourceReader())
        slot = ComponentMessages("de", "about")

        assert loader.load(slot, "about", "de") == 2
        assert slot.get_string("title") == "Über"
        assert slot.resource_path == f"{external_root}/about/messages_de.json"
        assert slot.resource_type == "bundle"

    def test_missing_file_leaves_slot_empty(self, external_root: Path) -> None:
        config = offline_config(external_resource_root=str(external_root))
        loader = OfflineLoader(config, ParserRegistry(), PackageResourceReader())
        slot = ComponentMessages("ja", "about")
        assert loader.load(slot, "about", "ja") == 0
        assert slot.resource_path is None

    def test_internal_bundle(self, internal_package: tuple[str, Path]) -> None:
        name, package = internal_package
        write_bundle(package, "about", "", {"title": "About"})
        config = offline_config(
            default_resource_format="bundle,internal", internal_resource_root=name
        )
        loader = OfflineLoader(config, ParserRegistry(), PackageResourceReader())
        slot = ComponentMessages("en", "about")

        assert loader.load(slot, "about", "en") == 1
        assert slot.get_string("title") == "About"
        assert slot.resource_path is None

    def test_internal_without_root_skipped(self) -> None:
        reader = RecordingReader(internal={"about/messages.json": '{"a": "b"}'})
        config = offline_config(default_resource_format="bundle,internal")
        loader = OfflineLoader(config, ParserRegistry(), reader)
        assert loader.load(ComponentMessages("en", "about"), "about", "en") == 0
        assert reader.reads == []

    def test_multiple_descriptors_merge(self) -> None:
        reader = RecordingReader(
            external={
                "root/a.properties": "title = Über\nsave = Sichern\n",
                "root/b.json": '{"save": "Speichern", "quit": "Beenden"}',
            }
        )
        config = offline_config(
            external_resource_root="root",
            component_configs=(
                ComponentConfig("about", {"de": ("a.properties,properties", "b.json")}),
            ),
        )
        loader = OfflineLoader(config, ParserRegistry(), reader)
        slot = ComponentMessages("de", "about")

        assert loader.load(slot, "about", "de") == 3
        assert slot.as_dict() == {"title": "Über", "save": "Speichern", "quit": "Beenden"}
        assert slot.resource_path == "root/b.json"

    def test_unknown_parser_skipped(self) -> None:
        reader = RecordingReader(external={"x.yaml": "a: b"})
        config = offline_config(
            component_configs=(ComponentConfig("about", {"de": ("x.yaml,yaml",)}),)
        )
        loader = OfflineLoader(config, ParserRegistry(), reader)
        assert loader.load(ComponentMessages("de", "about"), "about", "de") == 0
        assert reader.reads == []

    def test_malformed_resource_skipped(self) -> None:
        reader = RecordingReader(external={"about/messages_de.json": "{broken"})
        loader = OfflineLoader(offline_config(), ParserRegistry(), reader)
        assert loader.load(ComponentMessages("de", "about"), "about", "de") == 0

    def test_deeply_nested_resource_skipped(self) -> None:
        reader = RecordingReader(external={"about/messages_de.json": "[" * 200_000})
        loader = OfflineLoader(offline_config(), ParserRegistry(), reader)
        assert loader.load(ComponentMessages("de", "about"), "about", "de") == 0

    def test_read_failure_skipped(self) -> None:
        reader = RecordingReader(fail={"about/messages_de.json"})
        loader = OfflineLoader(offline_config(), ParserRegistry(), reader)
        assert loader.load(ComponentMessages("de", "about"), "about", "de") == 0
        assert reader.reads == ["about/messages_de.json"]

    def test_unknown_store_type_skipped(self) -> None:
        reader = RecordingReader(external={"x.json": '{"a": "b"}'})
        config = offline_config(
            component_configs=(ComponentConfig("about", {"de": ("x.json,bundle,cloud",)}),)
        )
        loader = OfflineLoader(config, ParserRegistry(), reader)
        assert loader.load(ComponentMessages("de", "about"), "about", "de") == 0


class TestOfflineLoaderNearLocale:
    def test_requested_locale_descriptors_rendered_for_near_locale(self) -> None:
        reader = RecordingReader(
            external={"root/custom/about_de.json": '{"title": "Über"}'}
        )
        config = offline_config(
            external_resource_root="root",
            component_configs=(
                ComponentConfig("about", {"de-CH": ("custom/{component}{locale}.json",)}),
            ),
        )
        loader = OfflineLoader(config, ParserRegistry(), reader)
        slot = ComponentMessages("de-CH", "about")

        assert loader.load(slot, "about", "de-CH") == 0
        assert loader.load(slot, "about", "de") == 1
        assert slot.get_string("title") == "Über"
        assert reader.reads == ["root/custom/about_de-CH.json", "root/custom/about_de.json"]
