"""Locale fallback chain resolution.

A chain lists the candidate locales to probe for a requested locale, most
specific first, ending at the configured source locale:

    de-CH  ->  ("de-CH", "de", "en")        source "en"
    en-US  ->  ("en-US", "en")              source "en"
    en     ->  ("en",)                      source "en"

Chains are pure functions of (requested locale, source locale): no cache
or network side effects, cheap to recompute, never memoized.
"""

from __future__ import annotations

from l10nsync.locale_utils import normalize_locale, split_subtags

__all__ = ["LocaleResolver"]


class LocaleResolver:
    """Builds ordered, deduplicated fallback chains ending at the source locale.

    Rules:
        1. The requested locale itself (exact match) comes first.
        2. Progressively less specific locales follow, dropping one trailing
           subtag at a time ("zh-Hans-CN" -> "zh-Hans" -> "zh").
        3. The source locale is always last. If it is reached while
           stripping subtags, the chain stops there; otherwise it is appended.

    Comparison is case-insensitive; elements keep the spelling of the request
    (and of the configured source locale).

    Example:
        >>> resolver = LocaleResolver("en")
        >>> resolver.chain("de-CH")
        ('de-CH', 'de', 'en')
    """

    __slots__ = ("_source_key", "_source_locale")

    def __init__(self, source_locale: str) -> None:
        """Initialize resolver.

        Args:
            source_locale: Authoritative locale, final element of every chain

        Raises:
            ValueError: If source_locale is empty
        """
        if not source_locale.strip():
            msg = "Source locale cannot be empty"
            raise ValueError(msg)
        self._source_locale = source_locale.strip()
        self._source_key = normalize_locale(source_locale)

    @property
    def source_locale(self) -> str:
        """Configured source locale."""
        return self._source_locale

    def is_source(self, locale_code: str) -> bool:
        """Check whether locale_code names the source locale."""
        return normalize_locale(locale_code) == self._source_key

    def chain(self, locale_code: str) -> tuple[str, ...]:
        """Return the fallback chain for a requested locale.

        Args:
            locale_code: Requested locale; empty or blank requests resolve
                to the source locale alone

        Returns:
            Non-empty tuple of near-locales, last element is the source locale
        """
        separator = "_" if "_" in locale_code and "-" not in locale_code else "-"
        subtags = split_subtags(locale_code)

        result: list[str] = []
        seen: set[str] = set()
        for end in range(len(subtags), 0, -1):
            candidate = separator.join(subtags[:end])
            key = normalize_locale(candidate)
            if key == self._source_key:
                result.append(self._source_locale)
                return tuple(result)
            if key not in seen:
                seen.add(key)
                result.append(candidate)

        result.append(self._source_locale)
        return tuple(result)
