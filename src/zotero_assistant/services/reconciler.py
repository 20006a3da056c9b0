"""
Change reconciliation for existing items.

Turns replace/add/remove change requests into a patch against the item's
current state and applies it under optimistic concurrency: the patch is
conditioned on the version that was read, and a concurrent modification
surfaces as a conflict instead of being overwritten.
"""

import logging
from typing import Any

from zotero_assistant.clients.zotero_client import ZoteroAPIClient
from zotero_assistant.models.items import ItemChanges
from zotero_assistant.utils.errors import ValidationError

logger = logging.getLogger(__name__)

# Change field -> item data field
SCALAR_FIELDS: dict[str, str] = {
    "title": "title",
    "abstract": "abstractNote",
    "date": "date",
    "extra": "extra",
}


def _tag_name(tag: Any) -> str:
    return tag.get("tag", "") if isinstance(tag, dict) else str(tag)


def merge_tags(
    existing: list[Any],
    replace: list[str] | None = None,
    add: list[str] | None = None,
    remove: list[str] | None = None,
) -> list[dict[str, Any]]:
    """
    Compute the resulting tag list.

    A replacement list wins outright. Otherwise existing tags keep their
    order and their stored attributes, added names are appended when not
    already present and removed names are dropped.

    Examples:
        >>> merge_tags([{"tag": "x"}], add=["y"], remove=["x"])
        [{'tag': 'y'}]
    """
    if replace is not None:
        return [{"tag": name} for name in dict.fromkeys(replace)]

    tags = [t if isinstance(t, dict) else {"tag": str(t)} for t in existing]
    names = {_tag_name(t) for t in tags}
    for name in add or []:
        if name not in names:
            tags.append({"tag": name})
            names.add(name)
    removed = set(remove or [])
    return [t for t in tags if _tag_name(t) not in removed]


def merge_collections(
    existing: list[str],
    replace: list[str] | None = None,
    add: list[str] | None = None,
    remove: list[str] | None = None,
) -> list[str]:
    """Compute the resulting collection keys with the same rules as tags."""
    if replace is not None:
        return list(dict.fromkeys(replace))

    keys = list(existing)
    for key in add or []:
        if key not in keys:
            keys.append(key)
    removed = set(remove or [])
    return [k for k in keys if k not in removed]


def reconcile(current: dict[str, Any], changes: ItemChanges) -> dict[str, Any]:
    """
    Build the minimal patch for ``changes`` against ``current`` item data.

    Only fields the change set touches appear in the patch.
    """
    patch: dict[str, Any] = {}

    for source, target in SCALAR_FIELDS.items():
        value = getattr(changes, source)
        if value is not None:
            patch[target] = value

    if any(v is not None for v in (changes.tags, changes.add_tags, changes.remove_tags)):
        patch["tags"] = merge_tags(
            current.get("tags", []),
            replace=changes.tags,
            add=changes.add_tags,
            remove=changes.remove_tags,
        )

    if any(
        v is not None
        for v in (changes.collections, changes.add_collections, changes.remove_collections)
    ):
        patch["collections"] = merge_collections(
            current.get("collections", []),
            replace=changes.collections,
            add=changes.add_collections,
            remove=changes.remove_collections,
        )

    return patch


class ChangeReconciler:
    """Applies change sets to existing items."""

    def __init__(self, api_client: ZoteroAPIClient):
        self.api_client = api_client

    async def apply(
        self,
        item_key: str,
        changes: ItemChanges,
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        """
        Merge ``changes`` into an item.

        Args:
            item_key: Key of the item to update
            changes: Fields to set and tags/collections to replace, add or remove
            expected_version: Version the caller last observed. Defaults to
                the version read just before patching.

        Raises:
            ValidationError: If the change set is empty (no remote call is made)
            NotFoundError: If the item does not exist
            ConflictError: If the item changed since the version used
        """
        if changes.is_empty():
            raise ValidationError(
                "No changes provided",
                suggestion="Pass at least one of title, abstract, date, extra, "
                "tags, add_tags, remove_tags, collections, add_collections, "
                "remove_collections",
            )

        item = await self.api_client.get_item(item_key)
        current_version = item.get("version", item.get("data", {}).get("version"))
        version = expected_version if expected_version is not None else current_version

        patch = reconcile(item.get("data", {}), changes)
        logger.info(
            f"Updating {item_key} at version {version}: {', '.join(sorted(patch))}"
        )
        await self.api_client.update_item(item_key, version, patch)

        return {
            "success": True,
            "item_key": item_key,
            "version": version,
            "updated_fields": sorted(patch),
            "message": f"Item {item_key} updated",
        }
