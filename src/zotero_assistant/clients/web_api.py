"""
Zotero Web API client for endpoints pyzotero does not expose in the needed shape.

Covers full-text records, tags with item counts, group listing, attachment
file download and the three-step file upload protocol.

API Docs: https://www.zotero.org/support/dev/web_api/v3/start
"""

import hashlib
import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from zotero_assistant.clients.zotero_client import (
    METADATA_TIMEOUT,
    ZOTERO_API_BASE,
    LibraryRef,
)
from zotero_assistant.models.fulltext import FulltextRecord
from zotero_assistant.utils.errors import (
    AuthenticationError,
    NotFoundError,
    RemoteRejection,
    TransportError,
    format_api_error,
)

logger = logging.getLogger(__name__)

# Zotero Web API version sent with every request
API_VERSION = "3"

# Binary transfers get a longer timeout than metadata calls
TRANSFER_TIMEOUT = 60.0


def _total_results(response: httpx.Response) -> int | None:
    raw = response.headers.get("Total-Results")
    try:
        return int(raw) if raw is not None else None
    except ValueError:
        return None


class ZoteroWebAPI:
    """Async httpx client bound to one Zotero library."""

    def __init__(
        self,
        library: LibraryRef,
        base_url: str = ZOTERO_API_BASE,
        metadata_timeout: float = METADATA_TIMEOUT,
        transfer_timeout: float = TRANSFER_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the Web API client.

        Args:
            library: Library credentials and identity
            base_url: Zotero API base URL
            metadata_timeout: Timeout for JSON requests
            transfer_timeout: Timeout for file uploads and downloads
            transport: Optional httpx transport (used by tests)
        """
        self.library = library
        self.base_url = base_url.rstrip("/")
        self.metadata_timeout = metadata_timeout
        self.transfer_timeout = transfer_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Build request headers."""
        return {
            "Zotero-API-Key": self.library.api_key,
            "Zotero-API-Version": API_VERSION,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.metadata_timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _path(self, suffix: str) -> str:
        return f"/{self.library.prefix}/{suffix.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        description: str,
        *,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request and translate failures.

        Raises:
            TransportError: On network failure or timeout
            AuthenticationError: On HTTP 401/403
            NotFoundError: On HTTP 404
            RemoteRejection: On any other non-2xx status
        """
        client = await self._get_client()
        try:
            response = await client.request(
                method, path, timeout=timeout or self.metadata_timeout, **kwargs
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"{description}: request timed out") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{description}: {e}") from e

        if response.is_success:
            return response

        status = response.status_code
        body = response.text
        if status in (401, 403):
            raise AuthenticationError(
                f"{description}: {format_api_error(status)}",
                suggestion="Check that ZOTERO_API_KEY has access to this library",
            )
        if status == 404:
            raise NotFoundError(f"{description}: not found")
        raise RemoteRejection(
            f"{description}: {format_api_error(status, body)}",
            status_code=status,
            body=body,
        )

    # -------------------- Full text --------------------

    async def get_fulltext(self, item_key: str) -> FulltextRecord | None:
        """
        Get the extracted text of an attachment.

        Returns:
            The record, or None when the store has no full text for the item
        """
        try:
            response = await self._request(
                "GET",
                self._path(f"items/{item_key}/fulltext"),
                f"Get full text of {item_key}",
            )
        except NotFoundError:
            return None
        try:
            return FulltextRecord.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise RemoteRejection(
                f"Get full text of {item_key}: malformed response",
                status_code=response.status_code,
                body=response.text,
            ) from e

    # -------------------- Tags & groups --------------------

    async def get_tags(
        self, limit: int = 100, start: int = 0
    ) -> tuple[list[dict[str, Any]], int | None]:
        """
        Get tags with their item counts.

        Returns:
            Tuple of ([{"tag", "numItems"}], Total-Results header value)
        """
        response = await self._request(
            "GET",
            self._path("tags"),
            "List tags",
            params={"limit": limit, "start": start},
        )
        tags = [
            {
                "tag": entry.get("tag", ""),
                "numItems": entry.get("meta", {}).get("numItems", 0),
            }
            for entry in response.json()
        ]
        return tags, _total_results(response)

    async def get_current_key(self) -> dict[str, Any]:
        """Get the API key's owner and access rights."""
        response = await self._request("GET", "/keys/current", "Get API key info")
        return response.json()

    async def list_groups(self, user_id: str) -> list[dict[str, Any]]:
        """List the groups ``user_id`` belongs to."""
        response = await self._request("GET", f"/users/{user_id}/groups", "List groups")
        return response.json()

    # -------------------- Files --------------------

    async def download_file(self, item_key: str) -> httpx.Response:
        """Download the stored file of an attachment item."""
        return await self._request(
            "GET",
            self._path(f"items/{item_key}/file"),
            f"Download file of {item_key}",
            timeout=self.transfer_timeout,
            follow_redirects=True,
        )

    async def upload_file(
        self,
        item_key: str,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> dict[str, Any]:
        """
        Upload file content for a registered attachment item.

        Runs authorize, upload and register in order. An authorization reply
        saying the file already exists counts as success.

        Returns:
            {"exists": bool, "md5": str}
        """
        md5 = hashlib.md5(content).hexdigest()
        file_path = self._path(f"items/{item_key}/file")
        description = f"Upload file for attachment {item_key}"

        # Step 1: authorize
        response = await self._request(
            "POST",
            file_path,
            description,
            data={
                "md5": md5,
                "filename": filename,
                "filesize": str(len(content)),
                "mtime": str(int(time.time() * 1000)),
            },
            headers={"If-None-Match": "*"},
        )
        auth = response.json()
        if auth.get("exists"):
            logger.info(f"File for {item_key} already exists on the server")
            return {"exists": True, "md5": md5}

        # Step 2: upload prefix + bytes + suffix to the storage URL
        body = (
            auth.get("prefix", "").encode("utf-8")
            + content
            + auth.get("suffix", "").encode("utf-8")
        )
        try:
            async with httpx.AsyncClient(
                timeout=self.transfer_timeout, transport=self._transport
            ) as storage:
                upload = await storage.post(
                    auth["url"],
                    content=body,
                    headers={"Content-Type": auth.get("contentType", content_type)},
                )
        except httpx.TimeoutException as e:
            raise TransportError(f"{description}: storage upload timed out") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{description}: {e}") from e
        if not upload.is_success:
            raise RemoteRejection(
                f"{description}: storage rejected upload with HTTP {upload.status_code}",
                status_code=upload.status_code,
                body=upload.text,
            )

        # Step 3: register the upload
        await self._request(
            "POST",
            file_path,
            description,
            data={"upload": auth["uploadKey"]},
            headers={"If-None-Match": "*"},
        )
        logger.info(f"Uploaded {len(content)} bytes for attachment {item_key}")
        return {"exists": False, "md5": md5}
