"""Tests for SyncConfig and ComponentConfig."""

from __future__ import annotations

import dataclasses

import pytest

from l10nsync.constants import default_batch_size
from l10nsync.errors import ConfigurationError
from l10nsync.localization.config import ComponentConfig, SyncConfig


class TestComponentConfig:
    def test_descriptor_lookup_case_insensitive(self) -> None:
        component = ComponentConfig("about", {"de-CH": ("a.json",)})
        assert component.descriptors_for("de_ch") == ("a.json",)
        assert component.descriptors_for("fr") is None

    def test_single_descriptor_string_wrapped(self) -> None:
        component = ComponentConfig("about", {"de": "a.json"})  # type: ignore[dict-item]
        assert component.locales["de"] == ("a.json",)

    def test_locales_frozen(self) -> None:
        component = ComponentConfig("about", {"de": ()})
        with pytest.raises(TypeError):
            component.locales["fr"] = ()  # type: ignore[index]

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Component name cannot be empty"):
            ComponentConfig(" ")


class TestSyncConfig:
    def test_defaults(self) -> None:
        config = SyncConfig()
        assert config.source_locale == "en"
        assert config.default_parser == "bundle"
        assert config.default_store_type == "internal"
        assert config.try_wait == 3.0
        assert config.batch_size == default_batch_size()
        assert not config.is_online_supported

    def test_online_requires_url(self) -> None:
        assert SyncConfig(online_service_url="https://l10n.test").is_online_supported
        offline = SyncConfig(online=False, online_service_url="https://l10n.test")
        assert not offline.is_online_supported

    def test_max_workers_sets_batch_size(self) -> None:
        assert SyncConfig(max_workers=3).batch_size == 3

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            SyncConfig().online = False  # type: ignore[misc]

    def test_lists_converted_to_tuples(self) -> None:
        config = SyncConfig(components=["about"])  # type: ignore[arg-type]
        assert config.components == ("about",)

    def test_parser_only_format(self) -> None:
        config = SyncConfig(default_resource_format="properties")
        assert config.default_parser == "properties"
        assert config.default_store_type == "internal"

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"source_locale": ""}, "source_locale"),
            ({"source_locale": " en"}, "source_locale"),
            ({"try_wait": 0}, "try_wait"),
            ({"max_workers": 0}, "max_workers"),
            ({"default_resource_format": ""}, "default_resource_format"),
            ({"default_resource_format": "bundle,cloud"}, "Unknown store type"),
            ({"default_resource_format": "a,b,c"}, "default_resource_format"),
        ],
    )
    def test_invalid_values(self, overrides: dict[str, object], message: str) -> None:
        with pytest.raises(ConfigurationError, match=message):
            SyncConfig(**overrides)  # type: ignore[arg-type]

    def test_find_component(self) -> None:
        about = ComponentConfig("About", {})
        config = SyncConfig(component_configs=(about,))
        assert config.find_component("ABOUT") is about
        assert config.find_component("settings") is None


class TestFromMapping:
    def test_component_configs_mapping(self) -> None:
        config = SyncConfig.from_mapping(
            {
                "product": "shop",
                "component_configs": {"about": {"en": [], "de": ["about/de.json"]}, "help": None},
            }
        )
        names = [component.name for component in config.component_configs]
        assert names == ["about", "help"]
        assert config.component_configs[0].descriptors_for("de") == ("about/de.json",)
        assert dict(config.component_configs[1].locales) == {}

    def test_single_component_string(self) -> None:
        assert SyncConfig.from_mapping({"components": "about"}).components == ("about",)

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown configuration option"):
            SyncConfig.from_mapping({"product": "shop", "colour": "blue"})
