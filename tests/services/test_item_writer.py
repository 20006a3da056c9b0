"""Test ItemWriter."""

from unittest.mock import AsyncMock

import pytest

from zotero_assistant.models.attachments import AttachmentOutcome, AttachmentStatus
from zotero_assistant.models.items import ItemFields
from zotero_assistant.services.attachments import AttachmentUploader
from zotero_assistant.services.item_writer import ItemWriter
from zotero_assistant.services.templates import TemplateService
from zotero_assistant.utils.errors import InvalidItemTypeError, RemoteRejection


@pytest.fixture
def mock_uploader():
    mock = AsyncMock(spec=AttachmentUploader)
    mock.attach_pdf.return_value = AttachmentOutcome(
        status=AttachmentStatus.UPLOADED,
        parent_key="ITEM0001",
        attachment_key="ATT00001",
        filename="paper.pdf",
    )
    mock.attach_snapshot.return_value = AttachmentOutcome(
        status=AttachmentStatus.UPLOADED,
        parent_key="ITEM0001",
        attachment_key="ATT00002",
        filename="Page.html",
    )
    return mock


@pytest.fixture
def writer(mock_api_client, mock_uploader):
    return ItemWriter(mock_api_client, TemplateService(mock_api_client), mock_uploader)


@pytest.mark.asyncio
async def test_create_resolves_friendly_type(writer, mock_api_client):
    """Test that 'article' is created as a journalArticle."""
    result = await writer.create(
        ItemFields(title="T", authors=["Jane Doe"], tags=["x"]), item_type="article"
    )

    mock_api_client.get_item_template.assert_awaited_once_with("journalArticle")
    payload = mock_api_client.create_items.await_args.args[0][0]
    assert payload["itemType"] == "journalArticle"
    assert payload["title"] == "T"
    assert payload["creators"] == [
        {"creatorType": "author", "firstName": "Jane", "lastName": "Doe"}
    ]
    assert payload["tags"] == [{"tag": "x"}]

    assert result == {
        "success": True,
        "item_key": "ITEM0001",
        "item_type": "journalArticle",
        "message": "Created journalArticle: T",
    }


@pytest.mark.asyncio
async def test_create_defaults_to_webpage(writer, mock_api_client):
    result = await writer.create(ItemFields(title="Blog post"))

    mock_api_client.get_item_template.assert_awaited_once_with("webpage")
    assert result["item_type"] == "webpage"


@pytest.mark.asyncio
async def test_pdf_takes_priority_over_snapshot(writer, mock_uploader):
    """Test that only one attachment is made when both sources are given."""
    result = await writer.create(
        ItemFields(title="T"),
        pdf_url="https://example.org/paper.pdf",
        snapshot_url="https://example.org/page",
    )

    mock_uploader.attach_pdf.assert_awaited_once_with(
        "ITEM0001", "https://example.org/paper.pdf"
    )
    mock_uploader.attach_snapshot.assert_not_awaited()
    assert result["pdf_attachment"]["attachment_key"] == "ATT00001"
    assert "snapshot_attachment" not in result


@pytest.mark.asyncio
async def test_snapshot_attached_without_pdf(writer, mock_uploader):
    result = await writer.create(
        ItemFields(title="T"), snapshot_url="https://example.org/page"
    )

    mock_uploader.attach_snapshot.assert_awaited_once_with(
        "ITEM0001", "https://example.org/page"
    )
    assert result["snapshot_attachment"]["uploaded"] is True


@pytest.mark.asyncio
async def test_attachment_failure_keeps_outer_success(writer, mock_uploader):
    """Test that a failed download is reported inside a successful result."""
    mock_uploader.attach_pdf.return_value = AttachmentOutcome(
        status=AttachmentStatus.SOURCE_FAILED,
        parent_key="ITEM0001",
        source_url="https://example.org/paper.pdf",
        error="Failed to download PDF: HTTP 404",
    )

    result = await writer.create(
        ItemFields(title="T"), pdf_url="https://example.org/paper.pdf"
    )

    assert result["success"] is True
    assert result["item_key"] == "ITEM0001"
    assert result["pdf_attachment"]["success"] is False
    assert result["pdf_attachment"]["status"] == "source_failed"
    assert "404" in result["pdf_attachment"]["error"]


@pytest.mark.asyncio
async def test_invalid_item_type_creates_nothing(writer, mock_api_client):
    mock_api_client.get_item_template.side_effect = InvalidItemTypeError(
        "bogusType", "Invalid item type"
    )

    with pytest.raises(InvalidItemTypeError):
        await writer.create(ItemFields(title="T"), item_type="bogusType")

    mock_api_client.create_items.assert_not_awaited()


@pytest.mark.asyncio
async def test_store_rejection_propagates(writer, mock_api_client, mock_uploader):
    mock_api_client.create_items.return_value = {
        "successful": {},
        "success": {},
        "unchanged": {},
        "failed": {"0": {"code": 400, "message": "Invalid field"}},
    }

    with pytest.raises(RemoteRejection):
        await writer.create(ItemFields(title="T"), pdf_url="https://example.org/a.pdf")

    mock_uploader.attach_pdf.assert_not_awaited()
