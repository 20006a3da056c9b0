"""
Attachment Service.

Attaches PDFs and HTML snapshots fetched from URLs to existing items using
the register-then-upload protocol: the attachment record is created first,
then its file content is uploaded. The two phases can fail independently.
"""

import logging
import re

from bs4 import BeautifulSoup

from zotero_assistant.clients.fetcher import FetchedResource, SourceFetcher
from zotero_assistant.clients.web_api import ZoteroWebAPI
from zotero_assistant.clients.zotero_client import ZoteroAPIClient, created_key
from zotero_assistant.models.attachments import AttachmentOutcome, AttachmentStatus
from zotero_assistant.utils.errors import ZoteroMCPError
from zotero_assistant.utils.urls import last_path_segment, unwrap_url

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
HTML_CONTENT_TYPE = "text/html"

DEFAULT_PDF_FILENAME = "attachment.pdf"
DEFAULT_SNAPSHOT_NAME = "snapshot"
MAX_SNAPSHOT_NAME_LENGTH = 80

_DISPOSITION_FILENAME = re.compile(r'filename="?([^";]+)"?')
_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w\s\-.]")


def pdf_filename(content_disposition: str, url: str) -> str:
    """
    Choose a filename for a downloaded PDF.

    Prefers the Content-Disposition filename, then the URL's last path
    segment with a ``.pdf`` suffix, then ``attachment.pdf``.
    """
    match = _DISPOSITION_FILENAME.search(content_disposition or "")
    if match:
        name = match.group(1).strip().strip("'")
        if name:
            return name

    segment = last_path_segment(url)
    if not segment:
        return DEFAULT_PDF_FILENAME
    if not segment.lower().endswith(".pdf"):
        segment = f"{segment}.pdf"
    return segment


def page_title(html: str) -> str | None:
    """The page's ``<title>`` text, or None when absent or blank."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.title is None:
        return None
    title = soup.title.get_text(strip=True)
    return title or None


def snapshot_filename(title: str) -> str:
    """
    Derive a safe ``.html`` filename from a page title.

    Examples:
        >>> snapshot_filename("A/B: Notes?")
        'AB Notes.html'
        >>> snapshot_filename("???")
        'snapshot.html'
    """
    safe = _UNSAFE_FILENAME_CHARS.sub("", title)[:MAX_SNAPSHOT_NAME_LENGTH].strip()
    return f"{safe or DEFAULT_SNAPSHOT_NAME}.html"


def _looks_like_html(resource: FetchedResource) -> bool:
    head = resource.text.lstrip()[:15].lower()
    return "html" in resource.content_type.lower() or head.startswith(("<", "<!doctype"))


class AttachmentUploader:
    """Attaches files fetched from URLs to parent items."""

    def __init__(
        self,
        api_client: ZoteroAPIClient,
        web_api: ZoteroWebAPI,
        fetcher: SourceFetcher,
    ):
        """
        Initialize AttachmentUploader.

        Args:
            api_client: pyzotero client used to register attachment records
            web_api: Web API client used for the file upload protocol
            fetcher: Source URL fetcher
        """
        self.api_client = api_client
        self.web_api = web_api
        self.fetcher = fetcher

    async def attach_pdf(
        self, parent_key: str, pdf_url: str, filename: str | None = None
    ) -> AttachmentOutcome:
        """
        Download a PDF and attach it to ``parent_key``.

        Args:
            parent_key: Key of the parent item
            pdf_url: PDF URL, possibly wrapped by a renderer or proxy
            filename: Explicit filename, derived from the response if omitted

        Returns:
            Outcome describing where the protocol stopped
        """
        source_url = self._unwrap(pdf_url)
        logger.info(f"Fetching PDF for {parent_key} from {source_url}")

        try:
            resource = await self.fetcher.fetch(source_url)
        except ZoteroMCPError as e:
            return self._source_failed(parent_key, source_url, f"Failed to download PDF: {e}")

        if not resource.content:
            return self._source_failed(
                parent_key, source_url, "Downloaded PDF is empty (0 bytes)"
            )

        if not resource.is_pdf and "octet-stream" not in resource.content_type.lower():
            logger.warning(
                f"Content-Type '{resource.content_type}' from {source_url} may not be "
                f"a PDF ({resource.size} bytes)"
            )

        name = filename or pdf_filename(resource.content_disposition, source_url)
        return await self._register_and_upload(
            parent_key=parent_key,
            title=name,
            filename=name,
            content=resource.content,
            content_type=PDF_CONTENT_TYPE,
            source_url=source_url,
        )

    async def attach_snapshot(
        self, parent_key: str, url: str, title: str | None = None
    ) -> AttachmentOutcome:
        """
        Save a web page as an HTML snapshot attached to ``parent_key``.

        Args:
            parent_key: Key of the parent item
            url: Page URL, possibly wrapped by a screenshot or proxy service
            title: Explicit title, taken from the page if omitted

        Returns:
            Outcome describing where the protocol stopped
        """
        source_url = self._unwrap(url)
        logger.info(f"Fetching page for {parent_key} from {source_url}")

        try:
            resource = await self.fetcher.fetch(source_url)
        except ZoteroMCPError as e:
            return self._source_failed(parent_key, source_url, f"Failed to fetch page: {e}")

        if not resource.content:
            return self._source_failed(
                parent_key, source_url, "Fetched page is empty (0 bytes)"
            )

        if resource.final_url != source_url:
            logger.info(f"Redirected from {source_url} to {resource.final_url}")
        if not _looks_like_html(resource):
            logger.warning(
                f"Response from {source_url} may not be HTML "
                f"(Content-Type '{resource.content_type}')"
            )

        snapshot_title = title or page_title(resource.text) or source_url
        return await self._register_and_upload(
            parent_key=parent_key,
            title=snapshot_title,
            filename=snapshot_filename(snapshot_title),
            content=resource.content,
            content_type=HTML_CONTENT_TYPE,
            source_url=source_url,
        )

    # -------------------- Protocol --------------------

    async def _register_and_upload(
        self,
        *,
        parent_key: str,
        title: str,
        filename: str,
        content: bytes,
        content_type: str,
        source_url: str,
    ) -> AttachmentOutcome:
        outcome = AttachmentOutcome(
            status=AttachmentStatus.REGISTRATION_FAILED,
            parent_key=parent_key,
            filename=filename,
            title=title,
            content_type=content_type,
            size_bytes=len(content),
            source_url=source_url,
        )

        # Phase 1: register the attachment record
        record = {
            "itemType": "attachment",
            "parentItem": parent_key,
            "linkMode": "imported_file",
            "title": title,
            "contentType": content_type,
            "filename": filename,
        }
        try:
            result = await self.api_client.create_items([record])
            attachment_key = created_key(result, "Failed to create attachment item")
        except ZoteroMCPError as e:
            logger.error(f"Attachment registration for {parent_key} failed: {e}")
            outcome.error = str(e)
            return outcome

        outcome.attachment_key = attachment_key
        logger.info(
            f"Registered attachment {attachment_key} on {parent_key}; "
            f"uploading {len(content)} bytes"
        )

        # Phase 2: upload the file content
        try:
            await self.web_api.upload_file(attachment_key, filename, content, content_type)
        except ZoteroMCPError as e:
            logger.error(f"Upload for attachment {attachment_key} failed: {e}")
            outcome.status = AttachmentStatus.UPLOAD_FAILED
            outcome.error = str(e)
            return outcome

        outcome.status = AttachmentStatus.UPLOADED
        logger.info(f"Attached {filename} to {parent_key}")
        return outcome

    @staticmethod
    def _unwrap(url: str) -> str:
        unwrapped = unwrap_url(url)
        if unwrapped != url:
            logger.info(f"Unwrapped {url} to {unwrapped}")
        return unwrapped

    @staticmethod
    def _source_failed(parent_key: str, source_url: str, error: str) -> AttachmentOutcome:
        logger.error(error)
        return AttachmentOutcome(
            status=AttachmentStatus.SOURCE_FAILED,
            parent_key=parent_key,
            source_url=source_url,
            error=error,
        )
