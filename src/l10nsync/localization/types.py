"""Type aliases for the localization domain.

Semantic aliases used throughout the package and by user code when
annotating orchestrator call sites.
"""

__all__ = [
    "ComponentName",
    "LocaleCode",
    "MessageKey",
    "Messages",
]

type LocaleCode = str
"""Locale identifier (e.g., 'en', 'de-CH', 'zh-Hans-CN'). Compared case-insensitively."""

type ComponentName = str
"""Logical group of messages (e.g., 'about', 'settings'). Compared case-insensitively."""

type MessageKey = str
"""Key of a single message inside a component."""

type Messages = dict[MessageKey, str]
"""Decoded key/value content of one resource."""
