"""
Item templates and mapping of caller fields onto them.
"""

import copy
import logging
from typing import Any

from zotero_assistant.clients.zotero_client import ZoteroAPIClient
from zotero_assistant.models.items import ItemFields

logger = logging.getLogger(__name__)

# Fields copied only when the template for the item type declares them
OPTIONAL_FIELDS: dict[str, str] = {
    "url": "url",
    "abstract": "abstractNote",
    "extra": "extra",
    "volume": "volume",
    "issue": "issue",
    "pages": "pages",
    "doi": "DOI",
}

# Venue fields in order of preference
PUBLICATION_FIELDS = ("publicationTitle", "blogTitle", "websiteTitle")


class TemplateService:
    """Fetches the empty field template of a canonical item type."""

    def __init__(self, api_client: ZoteroAPIClient):
        self.api_client = api_client

    async def acquire(self, item_type: str) -> dict[str, Any]:
        """
        Get a fresh template for ``item_type``.

        Raises:
            InvalidItemTypeError: If the store rejects the type name
        """
        template = await self.api_client.get_item_template(item_type)
        logger.debug(f"Fetched template for {item_type} ({len(template)} fields)")
        return template


def parse_author(name: str) -> dict[str, str]:
    """
    Split a display name into a Zotero creator.

    Examples:
        >>> parse_author("Jane Q Doe")
        {'creatorType': 'author', 'firstName': 'Jane Q', 'lastName': 'Doe'}
        >>> parse_author("UNESCO")
        {'creatorType': 'author', 'name': 'UNESCO'}
    """
    parts = name.split()
    if len(parts) >= 2:
        return {
            "creatorType": "author",
            "firstName": " ".join(parts[:-1]),
            "lastName": parts[-1],
        }
    return {"creatorType": "author", "name": name.strip()}


def map_fields(template: dict[str, Any], fields: ItemFields) -> dict[str, Any]:
    """
    Merge caller fields into a template.

    The template is not modified. Optional fields are only written when
    the template declares them, so the store never sees fields that are
    invalid for the item type.

    Args:
        template: Template as returned by the store
        fields: Caller-supplied bibliographic fields

    Returns:
        New item payload ready for creation
    """
    item = copy.deepcopy(template)

    item["title"] = fields.title
    if fields.date:
        item["date"] = fields.date

    for source, target in OPTIONAL_FIELDS.items():
        value = getattr(fields, source)
        if value and target in item:
            item[target] = value

    if fields.publication:
        for venue in PUBLICATION_FIELDS:
            if venue in item:
                item[venue] = fields.publication
                break

    if fields.authors and "creators" in item:
        item["creators"] = [parse_author(name) for name in fields.authors]

    item["tags"] = [{"tag": tag} for tag in fields.tags]

    if fields.collection_key:
        item["collections"] = [fields.collection_key]

    return item
