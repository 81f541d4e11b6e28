"""Remote collaborator: transport protocol, HTTP implementation, service API.

The orchestrator never talks HTTP directly. It calls a Transport, which
owns timeouts and connection handling and reports every failure as
TransportError. Retry and backoff policy, if any, belong to the transport.

Service responses share one envelope:

    {"response": {"code": 200}, "result": {"data": {...}}}

A document is accepted only when response.code is a 2xx code and the
expected field is present; anything else is "no update".
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote

import httpx

from l10nsync.constants import (
    API_PREFIX,
    KEY_CODE,
    KEY_DATA,
    KEY_MESSAGES,
    KEY_RESPONSE,
    KEY_RESULT,
)
from l10nsync.errors import TransportError

if TYPE_CHECKING:
    from l10nsync.localization.release import KnownList

__all__ = [
    "HttpxTransport",
    "RemoteApi",
    "Transport",
    "extract_data",
    "fetch_brief_info",
    "fetch_remote_messages",
]

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Protocol for performing remote reads.

    Implementations raise TransportError for network failures, non-success
    HTTP statuses and undecodable bodies.
    """

    def get_text(self, url: str, *, timeout: float) -> str:
        """GET url and return the response body as text."""

    def get_json(self, url: str, *, timeout: float) -> Any:
        """GET url and return the decoded JSON body."""


class HttpxTransport:
    """Transport backed by an httpx.Client.

    Example:
        >>> with HttpxTransport() as transport:
        ...     doc = transport.get_json("https://l10n.example.com/...", timeout=3.0)
    """

    __slots__ = ("_client", "_owns_client")

    def __init__(self, client: httpx.Client | None = None) -> None:
        """Initialize transport.

        Args:
            client: Preconfigured client (headers, auth, mounts). A private
                client is created and owned when omitted.
        """
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(follow_redirects=True)

    def _get(self, url: str, timeout: float) -> httpx.Response:
        try:
            response = self._client.get(url, timeout=timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            msg = f"GET {url} failed: {e}"
            raise TransportError(msg, url=url) from e
        return response

    def get_text(self, url: str, *, timeout: float) -> str:
        """GET url and return the body as text.

        Raises:
            TransportError: On network failure or non-2xx status
        """
        return self._get(url, timeout).text

    def get_json(self, url: str, *, timeout: float) -> Any:
        """GET url and decode the body as JSON.

        Raises:
            TransportError: On network failure, non-2xx status or invalid JSON
        """
        response = self._get(url, timeout)
        try:
            return response.json()
        except (ValueError, RecursionError) as e:
            msg = f"GET {url} returned invalid JSON: {e}"
            raise TransportError(msg, url=url) from e

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()


@dataclass(frozen=True, slots=True)
class RemoteApi:
    """URL builder for the translation service.

    Attributes:
        base_url: Service root, e.g. "https://l10n.example.com"
        product: Product name
        version: Release version
    """

    base_url: str
    product: str
    version: str

    @property
    def _prefix(self) -> str:
        path = API_PREFIX.format(
            product=quote(self.product, safe=""), version=quote(self.version, safe="")
        )
        return self.base_url.rstrip("/") + path

    def locale_list_url(self) -> str:
        """URL of the brief-info locale list."""
        return f"{self._prefix}/localelist"

    def component_list_url(self) -> str:
        """URL of the brief-info component list."""
        return f"{self._prefix}/componentlist"

    def translation_url(self, locale: str, component: str) -> str:
        """URL of one (locale, component) bundle."""
        return (
            f"{self._prefix}/locales/{quote(locale, safe='')}"
            f"/components/{quote(component, safe='')}"
        )


def extract_data(document: object) -> Mapping[str, Any] | None:
    """Return result.data of a successful response envelope, or None.

    Accepts only documents whose response.code is in the 2xx range.
    """
    if not isinstance(document, Mapping):
        return None
    response = document.get(KEY_RESPONSE)
    code = response.get(KEY_CODE) if isinstance(response, Mapping) else None
    if not isinstance(code, int) or isinstance(code, bool) or not 200 <= code < 300:
        return None
    result = document.get(KEY_RESULT)
    data = result.get(KEY_DATA) if isinstance(result, Mapping) else None
    return data if isinstance(data, Mapping) else None


def fetch_brief_info(
    transport: Transport,
    url: str,
    info_name: str,
    target: KnownList,
    *,
    timeout: float,
) -> bool:
    """Fetch one brief-info list and append its items to target.

    On transport failure, non-success status or malformed shape, target is
    left unchanged.

    Args:
        transport: Remote collaborator
        url: Brief-info endpoint
        info_name: Field under result.data ("locales" or "components")
        target: List receiving the items
        timeout: Per-request timeout in seconds

    Returns:
        True if the response was accepted
    """
    try:
        document = transport.get_json(url, timeout=timeout)
    except TransportError as e:
        logger.warning("Brief info '%s' unavailable: %s", info_name, e)
        return False

    data = extract_data(document)
    items = data.get(info_name) if data is not None else None
    if not isinstance(items, list):
        logger.warning("Brief info '%s' rejected: unexpected response shape", info_name)
        return False

    added = target.extend(str(item) for item in items if isinstance(item, str))
    logger.info("Brief info '%s': %d item(s), %d new", info_name, len(items), added)
    return True


def fetch_remote_messages(
    transport: Transport, url: str, *, timeout: float
) -> dict[str, str] | None:
    """Fetch a remote bundle's messages.

    Returns:
        Key/value messages, or None if the request failed or was rejected
    """
    try:
        document = transport.get_json(url, timeout=timeout)
    except TransportError as e:
        logger.warning("Remote bundle unavailable: %s", e)
        return None

    data = extract_data(document)
    messages = data.get(KEY_MESSAGES) if data is not None else None
    if not isinstance(messages, Mapping):
        logger.debug("Remote bundle rejected: %s", url)
        return None
    return {str(key): str(value) for key, value in messages.items()}
