"""Current-locale context.

The locale used by read calls that do not name one explicitly is held in
a ContextVar, so each thread and each asyncio task sees its own value.
"""

from __future__ import annotations

from contextvars import ContextVar, Token

__all__ = ["get_current_locale", "reset_current_locale", "set_current_locale"]

_current_locale: ContextVar[str | None] = ContextVar("l10nsync_current_locale", default=None)


def get_current_locale() -> str | None:
    """Return the locale set for the current context, if any."""
    return _current_locale.get()


def set_current_locale(locale: str | None) -> Token[str | None]:
    """Set the current locale. Returns a token for reset_current_locale()."""
    return _current_locale.set(locale.strip() if locale else None)


def reset_current_locale(token: Token[str | None]) -> None:
    """Restore the locale that was current before set_current_locale()."""
    _current_locale.reset(token)
