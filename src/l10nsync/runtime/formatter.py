"""Positional placeholder formatting with graceful degradation.

Templates reference arguments as {0}, {1}, ... Substitution never fails
because of missing arguments: a placeholder without a matching argument
is kept as its literal text.

    >>> PlaceholderFormatter().format("Hello {0} and {1}", ["Bob"])
    'Hello Bob and {1}'

Only {N} tokens are touched; any other braces in the template are left
as they are.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from l10nsync.runtime.plural_rules import BabelPluralFormatter, PluralFormatter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from l10nsync.runtime.plural_rules import Quantity

__all__ = ["PlaceholderFormatter"]

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(\d+)\}")


class PlaceholderFormatter:
    """Substitutes positional arguments into resolved message strings.

    Args:
        plural: Collaborator used by format_plural(); defaults to
            BabelPluralFormatter
    """

    __slots__ = ("_plural",)

    def __init__(self, plural: PluralFormatter | None = None) -> None:
        self._plural: PluralFormatter = plural if plural is not None else BabelPluralFormatter()

    @staticmethod
    def _substitute(template: str, args: Sequence[object]) -> str:
        return _PLACEHOLDER.sub(lambda match: str(args[int(match[1])]), template)

    @staticmethod
    def _substitute_lenient(template: str, args: Sequence[object]) -> str:
        """Substitute args, keeping placeholders past the last argument as text."""

        def replace(match: re.Match[str]) -> str:
            index = int(match[1])
            return str(args[index]) if index < len(args) else match[0]

        return _PLACEHOLDER.sub(replace, template)

    def format(self, template: str | None, args: Sequence[object] = ()) -> str | None:
        """Substitute args into template.

        Args:
            template: Message text, or None when the message was not found
            args: Positional arguments; extra arguments are ignored

        Returns:
            Formatted text, or None if template is None
        """
        if template is None:
            return None
        if not args:
            return template
        try:
            return self._substitute(template, args)
        except IndexError:
            logger.debug(
                "Template references more placeholders than the %d argument(s) given",
                len(args),
            )
            return self._substitute_lenient(template, args)

    def format_plural(
        self, template: str | None, quantity: Quantity, locale: str
    ) -> str | None:
        """Render a pluralized template for quantity.

        Uses the plural collaborator first; when it has no rendering for
        the template, falls back to format(template, [quantity]).

        Args:
            template: Message text, or None when the message was not found
            quantity: Number selecting the plural variant
            locale: Locale whose plural rules apply

        Returns:
            Rendered text, or None if template is None
        """
        if template is None:
            return None
        rendered = self._plural.format(template, quantity, locale)
        return self.format(rendered if rendered else template, [quantity])
