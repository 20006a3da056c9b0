"""
Zotero API client wrapper.

Provides async-compatible wrapper around pyzotero with proper types
and unified error handling.
"""

import asyncio
from dataclasses import dataclass
import logging
import re
from typing import Any, Literal

import httpx
from pyzotero import zotero, zotero_errors

from zotero_assistant.settings import ZoteroSettings
from zotero_assistant.utils.config import load_config
from zotero_assistant.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    InvalidItemTypeError,
    NotFoundError,
    RemoteRejection,
    TransportError,
    ZoteroMCPError,
)

logger = logging.getLogger(__name__)

LibraryType = Literal["user", "group"]

# Zotero Web API base URL
ZOTERO_API_BASE = "https://api.zotero.org"

# Timeout in seconds for JSON requests
METADATA_TIMEOUT = 30.0

_STATUS_BY_ERROR: dict[type[Exception], int] = {
    zotero_errors.UnsupportedParams: 400,
    zotero_errors.UserNotAuthorised: 403,
    zotero_errors.ResourceNotFound: 404,
    zotero_errors.PreConditionFailed: 412,
    zotero_errors.TooManyRequests: 429,
}

_CODE_PATTERN = re.compile(r"Code:\s*(\d{3})")
_RESPONSE_PATTERN = re.compile(r"Response:\s*(.*)", re.DOTALL)


@dataclass(frozen=True)
class LibraryRef:
    """Credentials and identity of the library every call operates on."""

    api_key: str
    library_id: str
    library_type: LibraryType = "user"

    @property
    def prefix(self) -> str:
        """URL prefix of the library on the Web API, e.g. ``users/123``."""
        kind = "groups" if self.library_type == "group" else "users"
        return f"{kind}/{self.library_id}"


def _store_message(error: Exception) -> str:
    """The response body pyzotero embeds in its exception text."""
    text = str(error)
    match = _RESPONSE_PATTERN.search(text)
    return (match.group(1) if match else text).strip()


def _status_code(error: Exception) -> int | None:
    for error_class, status in _STATUS_BY_ERROR.items():
        if isinstance(error, error_class):
            return status
    match = _CODE_PATTERN.search(str(error))
    return int(match.group(1)) if match else None


def translate_zotero_error(error: Exception, description: str) -> ZoteroMCPError:
    """
    Convert a pyzotero or httpx exception into the project's error taxonomy.

    Args:
        error: Exception raised inside pyzotero
        description: What was being attempted, used as message prefix

    Returns:
        Matching ZoteroMCPError subclass instance
    """
    if isinstance(error, ZoteroMCPError):
        return error
    if isinstance(error, httpx.TimeoutException):
        return TransportError(f"{description}: request timed out")
    if isinstance(error, httpx.HTTPError):
        return TransportError(f"{description}: {error}")
    if isinstance(error, zotero_errors.UserNotAuthorised):
        return AuthenticationError(
            f"{description}: not authorised",
            suggestion="Check that ZOTERO_API_KEY has access to this library",
        )
    if isinstance(error, zotero_errors.ResourceNotFound):
        return NotFoundError(f"{description}: not found")

    message = _store_message(error)
    status = _status_code(error)
    prefix = f"{description}: HTTP {status}" if status else description
    return RemoteRejection(f"{prefix} {message}".strip(), status_code=status, body=message)


def created_key(result: Any, description: str) -> str:
    """
    Extract the key of the first object from a write response.

    Raises:
        RemoteRejection: If the store reported the object as failed
    """
    # Older pyzotero releases return the bare HTTP status on failure
    if isinstance(result, int):
        raise RemoteRejection(f"{description}: HTTP {result}", status_code=result)
    if not isinstance(result, dict):
        raise RemoteRejection(f"{description}: unexpected response {result!r}")

    successful = result.get("successful") or {}
    if successful:
        first = next(iter(successful.values()))
        if isinstance(first, dict) and first.get("key"):
            return first["key"]
    success = result.get("success") or {}
    if success:
        return next(iter(success.values()))

    failed = result.get("failed") or {}
    if failed:
        failure = next(iter(failed.values()))
        code = failure.get("code")
        message = failure.get("message", "unknown error")
        raise RemoteRejection(
            f"{description}: {message}", status_code=code, body=str(failed)
        )
    raise RemoteRejection(f"{description}: no object created", body=str(result))


class ZoteroAPIClient:
    """
    Async-compatible wrapper around pyzotero.

    Blocking pyzotero calls run in a worker thread. Calls that read
    response headers or follow pagination use their own pyzotero instance,
    since pyzotero keeps the last response on the instance.
    """

    def __init__(
        self,
        library: LibraryRef,
        base_url: str = ZOTERO_API_BASE,
        timeout: float = METADATA_TIMEOUT,
    ):
        """
        Initialize Zotero API client.

        Args:
            library: Library credentials and identity
            base_url: Zotero API base URL
            timeout: Timeout for every pyzotero request
        """
        self.library = library
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = httpx.Client(timeout=timeout, follow_redirects=True)
        self._client: zotero.Zotero | None = None

    @property
    def client(self) -> zotero.Zotero:
        """Get or create the shared pyzotero client."""
        if self._client is None:
            self._client = self._new_client()
        return self._client

    def _new_client(self) -> zotero.Zotero:
        # Instances share one connection pool but never response state
        zot = zotero.Zotero(
            library_id=self.library.library_id,
            library_type=self.library.library_type,
            api_key=self.library.api_key,
            client=self._http,
        )
        zot.endpoint = self.base_url
        return zot

    def close(self) -> None:
        """Close the HTTP connection pool."""
        self._http.close()

    async def _call(self, description: str, func, *args, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except (zotero_errors.PyZoteroError, httpx.HTTPError) as e:
            raise translate_zotero_error(e, description) from e

    # -------------------- Templates --------------------

    async def get_item_template(self, item_type: str) -> dict[str, Any]:
        """
        Fetch the empty field template for a canonical item type.

        Raises:
            InvalidItemTypeError: If the store does not know the type
        """
        try:
            return await asyncio.to_thread(self.client.item_template, item_type)
        except (zotero_errors.UnsupportedParams, zotero_errors.ResourceNotFound) as e:
            raise InvalidItemTypeError(item_type, _store_message(e)) from e
        except (zotero_errors.PyZoteroError, httpx.HTTPError) as e:
            raise translate_zotero_error(e, f"Fetch template for '{item_type}'") from e

    # -------------------- Item Methods --------------------

    async def get_item(self, item_key: str) -> dict[str, Any]:
        """
        Get a single item by key, including its current version.

        Raises:
            NotFoundError: If item not found
        """
        try:
            return await self._call(f"Get item {item_key}", self.client.item, item_key)
        except NotFoundError as e:
            raise NotFoundError(f"Item not found: {item_key}") from e

    async def get_item_children(self, item_key: str) -> list[dict[str, Any]]:
        """
        Get child items (attachments, notes).

        Uses its own pyzotero instance so it can run alongside ``get_item``.
        """
        return await self._call(
            f"Get children of {item_key}", self._new_client().children, item_key
        )

    async def create_items(self, payload: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Create items in one write request.

        Returns:
            The store's write response (successful / unchanged / failed maps)
        """
        return await self._call("Create items", self.client.create_items, payload)

    async def update_item(
        self, item_key: str, version: int, patch: dict[str, Any]
    ) -> None:
        """
        PATCH an item conditioned on the version the caller observed.

        Raises:
            ConflictError: If the item changed since ``version``
        """
        payload = {**patch, "key": item_key, "version": version}
        try:
            await asyncio.to_thread(self.client.update_item, payload)
        except zotero_errors.PreConditionFailed as e:
            raise ConflictError(item_key, version) from e
        except (zotero_errors.PyZoteroError, httpx.HTTPError) as e:
            raise translate_zotero_error(e, f"Update item {item_key}") from e

    async def get_top_items(self, **params: Any) -> tuple[list[dict[str, Any]], int | None]:
        """
        Get top-level items with the store's Total-Results count.

        Args:
            **params: Web API query parameters (q, qmode, tag, itemType,
                sort, direction, limit, start)
        """

        def fetch() -> tuple[list[dict[str, Any]], int | None]:
            zot = self._new_client()
            items = zot.top(**params)
            return items, _total_results(zot)

        return await self._call("Get top items", fetch)

    async def get_collection_top_items(
        self, collection_key: str, **params: Any
    ) -> tuple[list[dict[str, Any]], int | None]:
        """Get top-level items of a collection with the Total-Results count."""

        def fetch() -> tuple[list[dict[str, Any]], int | None]:
            zot = self._new_client()
            items = zot.collection_items_top(collection_key, **params)
            return items, _total_results(zot)

        return await self._call(f"Get items of collection {collection_key}", fetch)

    # -------------------- Collection Methods --------------------

    async def get_collections(self) -> list[dict[str, Any]]:
        """Get every collection in the library, following pagination."""

        def fetch() -> list[dict[str, Any]]:
            zot = self._new_client()
            return zot.everything(zot.collections())

        return await self._call("List collections", fetch)

    async def create_collection(
        self, name: str, parent_key: str | None = None
    ) -> dict[str, Any]:
        """Create a collection, optionally nested under ``parent_key``."""
        payload: dict[str, Any] = {"name": name}
        if parent_key:
            payload["parentCollection"] = parent_key
        return await self._call(
            f"Create collection '{name}'", self.client.create_collections, [payload]
        )


def _total_results(zot: zotero.Zotero) -> int | None:
    response = getattr(zot, "request", None)
    if response is None:
        return None
    raw = response.headers.get("Total-Results")
    try:
        return int(raw) if raw is not None else None
    except ValueError:
        return None


def get_library_ref() -> LibraryRef:
    """
    Build the library reference from configuration.

    Environment Variables:
        ZOTERO_API_KEY: API key for web access
        ZOTERO_LIBRARY_ID: User or group library ID
        ZOTERO_LIBRARY_TYPE: "user" or "group" (default: "user")

    Raises:
        ConfigurationError: If required config is missing
    """
    load_config()
    config = ZoteroSettings()

    if not config.api_key:
        raise ConfigurationError(
            "ZOTERO_API_KEY is required",
            suggestion="Create a key at https://www.zotero.org/settings/keys",
        )
    if not config.library_id:
        raise ConfigurationError(
            "ZOTERO_LIBRARY_ID is required",
            suggestion="Use the numeric user ID shown on https://www.zotero.org/settings/keys",
        )
    if config.library_type not in ("user", "group"):
        raise ConfigurationError(
            f"Invalid ZOTERO_LIBRARY_TYPE '{config.library_type}'",
            suggestion="Use 'user' or 'group'",
        )

    return LibraryRef(
        api_key=config.api_key,
        library_id=config.library_id,
        library_type=config.library_type,  # type: ignore[arg-type]
    )
