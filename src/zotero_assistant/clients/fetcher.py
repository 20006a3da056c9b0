"""
Fetches PDF and HTML sources from arbitrary URLs.
"""

from dataclasses import dataclass
import logging

import httpx

from zotero_assistant.utils.errors import RemoteRejection, TransportError, ValidationError

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; ZoteroAssistantMCP/1.0)"

# Binary transfers get a longer timeout than metadata calls
DOWNLOAD_TIMEOUT = 60.0


@dataclass
class FetchedResource:
    """Body and headers of a fetched URL."""

    url: str
    final_url: str
    status_code: int
    content_type: str
    content_disposition: str
    content: bytes
    text: str

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_pdf(self) -> bool:
        return "pdf" in self.content_type.lower()


class SourceFetcher:
    """Downloads a single URL with a fixed User-Agent and no retries."""

    def __init__(
        self,
        user_agent: str = USER_AGENT,
        timeout: float = DOWNLOAD_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, url: str) -> FetchedResource:
        """
        Fetch ``url`` following redirects.

        Raises:
            ValidationError: If the URL cannot be requested at all
            TransportError: On network failure or timeout
            RemoteRejection: On a non-2xx response, carrying the upstream status
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            ) as client:
                response = await client.get(url)
        except httpx.InvalidURL as e:
            raise ValidationError(f"Invalid URL '{url}': {e}") from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Timed out after {self.timeout:g}s fetching {url}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to fetch {url}: {e}") from e

        if not response.is_success:
            raise RemoteRejection(
                f"Failed to download {url}: HTTP {response.status_code} "
                f"{response.reason_phrase}".strip(),
                status_code=response.status_code,
                body=response.text[:500],
            )

        logger.debug(
            f"Fetched {url} ({len(response.content)} bytes, "
            f"{response.headers.get('content-type', 'unknown type')})"
        )
        return FetchedResource(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
            content_disposition=response.headers.get("content-disposition", ""),
            content=response.content,
            text=response.text,
        )
