"""
End-to-end tests through LibraryService against an in-memory store.

The store enforces item versions, so concurrent-modification handling is
exercised the same way the Web API exercises it.
"""

import pytest

from zotero_assistant.models.fulltext import FulltextRecord
from zotero_assistant.models.items import ItemChanges, ItemFields


@pytest.mark.asyncio
async def test_save_then_retag(fake_service, fake_store):
    """Save an article, then swap one tag for another."""
    saved = await fake_service.save_item(
        ItemFields(title="T", authors=["Jane Doe"], tags=["x"]), item_type="article"
    )
    assert saved["success"] is True
    item_key = saved["item_key"]

    stored = fake_store.items[item_key]["data"]
    assert stored["itemType"] == "journalArticle"
    assert stored["creators"] == [
        {"creatorType": "author", "firstName": "Jane", "lastName": "Doe"}
    ]

    updated = await fake_service.update_item(
        item_key, ItemChanges(add_tags=["y"], remove_tags=["x"])
    )
    assert updated["success"] is True
    assert updated["updated_fields"] == ["tags"]

    item = await fake_service.get_item(item_key)
    assert {tag["tag"] for tag in item["tags"]} == {"y"}
    assert item["title"] == "T"


@pytest.mark.asyncio
async def test_stale_version_is_a_conflict(fake_service, fake_store):
    saved = await fake_service.save_item(ItemFields(title="T"), item_type="article")
    item_key = saved["item_key"]
    observed = (await fake_service.get_item(item_key))["version"]

    # Someone else edits the item first
    await fake_service.update_item(item_key, ItemChanges(title="Theirs"))

    result = await fake_service.update_item(
        item_key, ItemChanges(title="Mine"), expected_version=observed
    )

    assert result["success"] is False
    assert result["error_type"] == "conflict"
    assert fake_store.items[item_key]["data"]["title"] == "Theirs"


@pytest.mark.asyncio
async def test_empty_changes_make_no_update_call(fake_service, fake_store):
    saved = await fake_service.save_item(ItemFields(title="T"))
    fake_store.calls.clear()

    result = await fake_service.update_item(saved["item_key"], ItemChanges())

    assert result["error_type"] == "validation"
    assert fake_store.calls == []


@pytest.mark.asyncio
async def test_unknown_item_type(fake_service, fake_store):
    result = await fake_service.save_item(ItemFields(title="T"), item_type="bogusType")

    assert result["success"] is False
    assert result["error_type"] == "invalid_item_type"
    assert fake_store.items == {}


@pytest.mark.asyncio
async def test_saved_pdf_becomes_readable_fulltext(fake_service, fake_store, fake_web_api):
    """Save with a PDF, then read its text back once it has been indexed."""
    saved = await fake_service.save_item(
        ItemFields(title="Paper"),
        item_type="article",
        pdf_url="https://example.org/paper.pdf",
    )
    attachment = saved["pdf_attachment"]
    assert attachment["uploaded"] is True
    attachment_key = attachment["attachment_key"]
    assert fake_web_api.files[attachment_key] == b"%PDF-1.4 test"
    assert fake_store.items[attachment_key]["data"]["parentItem"] == saved["item_key"]

    before = await fake_service.get_item_fulltext(saved["item_key"])
    assert before["content"] is None
    assert before["attachments_checked"][0]["key"] == attachment_key

    fake_web_api.fulltext[attachment_key] = FulltextRecord(
        content="Extracted text", indexedPages=1, totalPages=1
    )
    after = await fake_service.get_item_fulltext(saved["item_key"])
    assert after["content"] == "Extracted text"
    assert after["attachment_key"] == attachment_key
    assert after["source"] == "child_attachment_fulltext"

    item = await fake_service.get_item(saved["item_key"])
    assert [child["key"] for child in item["children"]] == [attachment_key]


@pytest.mark.asyncio
async def test_collections_notes_and_stats(fake_service):
    created = await fake_service.create_collection("Reading")
    assert created["success"] is True

    saved = await fake_service.save_item(
        ItemFields(title="Filed", collection_key=created["collection_key"])
    )
    note = await fake_service.create_note(saved["item_key"], "<p>Remember</p>", ["todo"])
    assert note["success"] is True

    listed = await fake_service.list_collections()
    assert listed["collections"] == [
        {"key": created["collection_key"], "name": "Reading", "parent": None}
    ]

    stats = await fake_service.get_library_stats()
    assert stats["total_items"] == 1
    assert stats["total_collections"] == 1
    assert stats["last_modified_item"]["title"] == "Filed"
