"""
Common helper functions for Zotero Assistant.
"""

import re

# Precompiled regex for HTML tag removal
_HTML_TAG_PATTERN = re.compile(r"<.*?>")

# Item types that never appear in item listings
HIDDEN_ITEM_TYPES = frozenset({"attachment", "note"})


def format_creators(creators: list[dict[str, str]]) -> str | None:
    """
    Format creator names into a single string.

    Args:
        creators: List of creator objects from Zotero.
            Each creator may have 'firstName' and 'lastName' keys,
            or a single 'name' key for organizations/single-name authors.

    Returns:
        Semicolon-separated "First Last" names, or None when there are none.

    Examples:
        >>> format_creators([{"firstName": "Albert", "lastName": "Einstein"}])
        'Albert Einstein'
        >>> format_creators([{"name": "World Health Organization"}])
        'World Health Organization'
        >>> format_creators([]) is None
        True
    """
    names = []
    for creator in creators:
        if creator.get("name"):
            names.append(creator["name"])
        else:
            full = f"{creator.get('firstName', '')} {creator.get('lastName', '')}".strip()
            if full:
                names.append(full)
    return "; ".join(names) if names else None


def clean_html(raw_html: str) -> str:
    """
    Remove HTML tags from a string.

    Examples:
        >>> clean_html("<p>Hello <b>world</b></p>")
        'Hello world'
    """
    return re.sub(_HTML_TAG_PATTERN, "", raw_html)


def parse_tags(tags: list) -> list[str]:
    """
    Parse Zotero tag objects into a list of tag names.

    Plain strings are accepted as well as ``{"tag": ...}`` objects.
    """
    names = []
    for tag in tags or []:
        name = tag.get("tag", "") if isinstance(tag, dict) else str(tag)
        if name:
            names.append(name)
    return names


def format_item_summary(raw: dict) -> dict:
    """Compact summary of a library item for listings."""
    data = raw.get("data", raw)
    return {
        "key": raw.get("key") or data.get("key"),
        "title": data.get("title") or "(untitled)",
        "item_type": data.get("itemType"),
        "creators": format_creators(data.get("creators", [])),
        "date": data.get("date") or None,
        "tags": parse_tags(data.get("tags", [])),
        "url": data.get("url") or None,
    }


def is_listed_item(raw: dict) -> bool:
    """True for regular items; attachments and notes are filtered from listings."""
    return raw.get("data", {}).get("itemType") not in HIDDEN_ITEM_TYPES


def truncate_text(text: str, max_length: int = 100) -> str:
    """Cut ``text`` to at most ``max_length`` characters."""
    return text if len(text) <= max_length else text[:max_length]
