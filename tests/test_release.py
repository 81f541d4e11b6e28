"""Tests for ReleaseInfo scopes and KnownList."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from l10nsync.localization.release import KnownList, ReleaseInfo


class TestKnownList:
    def test_deduplicates_case_insensitively(self) -> None:
        names = KnownList()
        assert names.extend(["About", "about", " ABOUT ", "settings"]) == 2
        assert names.snapshot() == ("About", "settings")

    def test_locale_list_ignores_separator(self) -> None:
        locales = KnownList(locales=True)
        locales.extend(["de-CH", "de_ch"])
        assert list(locales) == ["de-CH"]
        assert "DE_CH" in locales

    def test_blank_items_ignored(self) -> None:
        names = KnownList()
        assert not names.append("  ")
        assert len(names) == 0

    def test_membership_non_string(self) -> None:
        assert 3 not in KnownList()

    def test_concurrent_extend(self) -> None:
        names = KnownList()
        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(lambda i: names.append(f"c{i % 10}"), range(200)))
        assert len(names) == 10


class TestReleaseInfo:
    def test_local_only_components(self) -> None:
        release = ReleaseInfo()
        release.local.components.extend(["about", "Help", "settings"])
        release.remote.components.extend(["ABOUT", "settings"])
        assert release.local_only_components() == ("Help",)

    def test_all_locales_remote_first(self) -> None:
        release = ReleaseInfo()
        release.remote.locales.extend(["de", "fr"])
        release.local.locales.extend(["en", "DE", "ja"])
        assert release.all_locales() == ("de", "fr", "en", "ja")

    def test_repr(self) -> None:
        release = ReleaseInfo()
        release.local.locales.append("en")
        assert repr(release) == (
            "ReleaseInfo(local=ScopeInfo(locales=1, components=0), "
            "remote=ScopeInfo(locales=0, components=0))"
        )
