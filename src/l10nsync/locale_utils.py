"""Locale utilities: normalization, comparison, and path suffixes.

Locales are compared case-insensitively and without regard to the
separator style ("en-US" == "en_us"). All keyed structures in the
library (dedup keys, cache slots, scope lists) normalize at the boundary
with normalize_locale() and use the normalized form for lookups.
"""

from __future__ import annotations

import functools
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from babel import Locale

__all__ = [
    "get_babel_locale",
    "locale_suffix",
    "locales_equal",
    "normalize_locale",
    "split_subtags",
]

_SEPARATORS = re.compile(r"[-_]")


def normalize_locale(locale_code: str) -> str:
    """Return the canonical comparison key for a locale code.

    Lowercases and converts BCP-47 hyphens to underscores so that
    "en-US", "EN_us" and "en_US" share one key.

    Args:
        locale_code: Locale code in any case or separator style

    Returns:
        Lowercase, underscore-separated locale code

    Example:
        >>> normalize_locale("zh-Hans-CN")
        'zh_hans_cn'
    """
    return locale_code.strip().replace("-", "_").lower()


def locales_equal(left: str, right: str) -> bool:
    """Case- and separator-insensitive locale comparison."""
    return normalize_locale(left) == normalize_locale(right)


def split_subtags(locale_code: str) -> list[str]:
    """Split a locale code on '-' or '_' separators, dropping empty parts."""
    return [part for part in _SEPARATORS.split(locale_code.strip()) if part]


def locale_suffix(locale_code: str, source_locale: str) -> str:
    """Return the resource-file suffix for a locale.

    The source locale's files carry no suffix (messages.json); every other
    locale's files carry "_" + locale (messages_de.json).

    Args:
        locale_code: Locale whose resource is being addressed
        source_locale: Configured source locale

    Returns:
        "" for the source locale, "_" + locale_code otherwise
    """
    if locales_equal(locale_code, source_locale):
        return ""
    return "_" + locale_code


@functools.lru_cache(maxsize=128)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Thread-safe via lru_cache internal locking.

    Args:
        locale_code: Locale code (BCP-47 or POSIX format accepted)

    Returns:
        Babel Locale object

    Raises:
        babel.core.UnknownLocaleError: If locale is not recognized
        ValueError: If locale format is invalid
    """
    # Lazy import: Babel loads CLDR data at import time; defer until needed
    from babel import Locale  # noqa: PLC0415

    return Locale.parse(locale_code.strip().replace("-", "_"))
