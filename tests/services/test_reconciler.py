"""Test change reconciliation."""

import pytest

from zotero_assistant.models.items import ItemChanges
from zotero_assistant.services.reconciler import (
    ChangeReconciler,
    merge_collections,
    merge_tags,
    reconcile,
)
from zotero_assistant.utils.errors import ConflictError, ValidationError

CURRENT = {
    "key": "ITEM0001",
    "version": 7,
    "itemType": "journalArticle",
    "title": "Old",
    "tags": [{"tag": "x"}, {"tag": "auto", "type": 1}],
    "collections": ["C1"],
}


def test_add_and_remove_tags():
    tags = merge_tags(CURRENT["tags"], add=["y"], remove=["x"])

    assert tags == [{"tag": "auto", "type": 1}, {"tag": "y"}]


def test_add_existing_tag_is_a_noop():
    assert merge_tags([{"tag": "x"}], add=["x"]) == [{"tag": "x"}]


def test_add_then_remove_same_tag():
    assert merge_tags([{"tag": "a"}], add=["b"], remove=["b"]) == [{"tag": "a"}]
    assert merge_tags([{"tag": "a"}, {"tag": "b"}], add=["a"], remove=["a"]) == [
        {"tag": "b"}
    ]


def test_remove_absent_tag_is_a_noop():
    assert merge_tags([{"tag": "x"}], remove=["missing"]) == [{"tag": "x"}]


def test_replace_tags_wins_and_dedupes():
    tags = merge_tags(CURRENT["tags"], replace=["a", "b", "a"], add=["c"])

    assert tags == [{"tag": "a"}, {"tag": "b"}]


def test_replace_with_empty_list_clears():
    assert merge_tags(CURRENT["tags"], replace=[]) == []
    assert merge_collections(["C1"], replace=[]) == []


def test_merge_collections():
    assert merge_collections(["C1", "C2"], add=["C3", "C1"], remove=["C2"]) == [
        "C1",
        "C3",
    ]


def test_reconcile_only_touches_requested_fields():
    """Test that the patch carries nothing the change set did not mention."""
    patch = reconcile(CURRENT, ItemChanges(title="New", abstract="Summary"))

    assert patch == {"title": "New", "abstractNote": "Summary"}


def test_reconcile_collections():
    patch = reconcile(CURRENT, ItemChanges(add_collections=["C2"]))

    assert patch == {"collections": ["C1", "C2"]}


@pytest.fixture
def reconciler(mock_api_client):
    mock_api_client.get_item.return_value = {
        "key": "ITEM0001",
        "version": 7,
        "data": dict(CURRENT),
    }
    return ChangeReconciler(mock_api_client)


@pytest.mark.asyncio
async def test_apply_conditions_on_read_version(reconciler, mock_api_client):
    result = await reconciler.apply(
        "ITEM0001", ItemChanges(add_tags=["y"], remove_tags=["x"])
    )

    mock_api_client.update_item.assert_awaited_once_with(
        "ITEM0001", 7, {"tags": [{"tag": "auto", "type": 1}, {"tag": "y"}]}
    )
    assert result == {
        "success": True,
        "item_key": "ITEM0001",
        "version": 7,
        "updated_fields": ["tags"],
        "message": "Item ITEM0001 updated",
    }


@pytest.mark.asyncio
async def test_apply_uses_expected_version(reconciler, mock_api_client):
    await reconciler.apply("ITEM0001", ItemChanges(title="New"), expected_version=5)

    assert mock_api_client.update_item.await_args.args[1] == 5


@pytest.mark.asyncio
async def test_apply_conflict_propagates(reconciler, mock_api_client):
    mock_api_client.update_item.side_effect = ConflictError("ITEM0001", 5)

    with pytest.raises(ConflictError) as excinfo:
        await reconciler.apply("ITEM0001", ItemChanges(title="New"), expected_version=5)

    assert excinfo.value.error_type == "conflict"


@pytest.mark.asyncio
async def test_empty_change_set_makes_no_remote_call(reconciler, mock_api_client):
    with pytest.raises(ValidationError, match="No changes provided"):
        await reconciler.apply("ITEM0001", ItemChanges())

    mock_api_client.get_item.assert_not_awaited()
    mock_api_client.update_item.assert_not_awaited()
