"""CLDR plural selection and the default plural formatting collaborator.

Plural-aware rendering is pluggable: PlaceholderFormatter.format_plural()
accepts any object implementing the PluralFormatter protocol. The default
implementation, BabelPluralFormatter, understands templates made only of
plural variants:

    one{# file} other{# files}
    =0{no files} one{one file} other{# files}

'#' is replaced with the quantity formatted for the locale. Templates that
are not plural variant lists yield None, and the caller falls back to plain
placeholder formatting.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Protocol

from babel.core import UnknownLocaleError
from babel.numbers import format_decimal

from l10nsync.locale_utils import get_babel_locale

__all__ = ["BabelPluralFormatter", "PluralFormatter", "select_plural_category"]

type Quantity = int | float | Decimal

# Variant body allows one level of nested braces so "{0}" placeholders survive.
_VARIANT = re.compile(
    r"\s*(=\d+|zero|one|two|few|many|other)\s*\{((?:[^{}]|\{[^{}]*\})*)\}"
)


def select_plural_category(n: Quantity, locale: str) -> str:
    """Select CLDR plural category for a number using Babel's CLDR data.

    Args:
        n: Number to categorize
        locale: Locale code (e.g., "lv_LV", "en-US", "ru")

    Returns:
        Plural category: "zero", "one", "two", "few", "many", or "other"

    Examples:
        >>> select_plural_category(1, "en")
        'one'
        >>> select_plural_category(5, "ru")
        'many'

    If locale parsing fails, falls back to the simple one/other rule.
    """
    try:
        locale_obj = get_babel_locale(locale)
    except (UnknownLocaleError, ValueError):
        return "one" if abs(n) == 1 else "other"
    return locale_obj.plural_form(n)


class PluralFormatter(Protocol):
    """Numeric-to-string collaborator for pluralized messages."""

    def format(self, template: str, quantity: Quantity, locale: str) -> str | None:
        """Render template for quantity, or return None if it has no plural form."""


def _parse_variants(template: str) -> dict[str, str] | None:
    variants: dict[str, str] = {}
    position = 0
    for match in _VARIANT.finditer(template):
        if match.start() != position:
            return None
        variants[match[1]] = match[2]
        position = match.end()
    if template[position:].strip() or "other" not in variants:
        return None
    return variants


def _exact_key(quantity: Quantity) -> str | None:
    try:
        whole = int(quantity)
    except (OverflowError, ValueError):
        return None
    return f"={whole}" if whole == quantity else None


def _format_quantity(quantity: Quantity, locale: str) -> str:
    try:
        return format_decimal(quantity, locale=get_babel_locale(locale))
    except (UnknownLocaleError, ValueError):
        return str(quantity)


class BabelPluralFormatter:
    """Default PluralFormatter backed by Babel's CLDR plural rules."""

    __slots__ = ()

    def format(self, template: str, quantity: Quantity, locale: str) -> str | None:
        """Pick the variant for quantity and substitute '#'.

        Exact "=N" variants win over CLDR categories; a missing category
        falls back to "other".

        Returns:
            Rendered variant, or None when template is not a variant list
        """
        variants = _parse_variants(template)
        if variants is None:
            return None

        exact = _exact_key(quantity)
        if exact in variants:
            chosen = variants[exact]
        else:
            category = select_plural_category(quantity, locale)
            chosen = variants.get(category, variants["other"])
        return chosen.replace("#", _format_quantity(quantity, locale)).strip()
