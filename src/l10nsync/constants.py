"""Shared constants for l10nsync.

Centralizes the literal tokens and defaults used by the loading, transport
and orchestration layers.

Constants are grouped by domain:
- Path template tokens: substituted into offline storage descriptors
- Remote service: brief-info field names, envelope keys, API path
- Defaults: values applied when configuration omits a field
"""

import os

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Path template tokens
    "PLACE_COMPONENT",
    "PLACE_LOCALE",
    "PLACE_LOCALE_TAG",
    "PLACE_NO_LOCALE",
    "CANONICAL_FILE_STEM",
    # Remote service
    "INFO_LOCALES",
    "INFO_COMPONENTS",
    "KEY_RESPONSE",
    "KEY_CODE",
    "KEY_RESULT",
    "KEY_DATA",
    "KEY_MESSAGES",
    "API_PREFIX",
    # Defaults
    "DEFAULT_SOURCE_LOCALE",
    "DEFAULT_RESOURCE_FORMAT",
    "DEFAULT_TRY_WAIT",
    "default_batch_size",
]

# ============================================================================
# PATH TEMPLATE TOKENS
# ============================================================================

# Replaced with the component name.
PLACE_COMPONENT: str = "{component}"

# Replaced with the locale suffix: "" for the source locale, "_" + locale otherwise.
# e.g. "{component}/messages{locale}.json" -> "foo/messages_de.json"
PLACE_LOCALE: str = "{locale}"

# Replaced with the bare locale tag, e.g. "{locale_tag}/strings.json" -> "de/strings.json"
PLACE_LOCALE_TAG: str = "{locale_tag}"

# Sentinel asking for the component's canonical path (see CANONICAL_FILE_STEM).
PLACE_NO_LOCALE: str = "{no_locale}"

# Canonical resource file stem: {component}/messages{_locale}.{ext}
CANONICAL_FILE_STEM: str = "messages"

# ============================================================================
# REMOTE SERVICE
# ============================================================================

# Brief-info field names under result.data
INFO_LOCALES: str = "locales"
INFO_COMPONENTS: str = "components"

# Response envelope keys
KEY_RESPONSE: str = "response"
KEY_CODE: str = "code"
KEY_RESULT: str = "result"
KEY_DATA: str = "data"
KEY_MESSAGES: str = "messages"

API_PREFIX: str = "/i18n/api/v2/translation/products/{product}/versions/{version}"

# ============================================================================
# DEFAULTS
# ============================================================================

DEFAULT_SOURCE_LOCALE: str = "en"

# "parserName,storeType" used to fill missing trailing descriptor fields
DEFAULT_RESOURCE_FORMAT: str = "bundle,internal"

# Seconds; forwarded to the transport as its per-request timeout
DEFAULT_TRY_WAIT: float = 3.0


def default_batch_size() -> int:
    """Return the default batch width: twice the available hardware parallelism."""
    return 2 * (os.cpu_count() or 1)
