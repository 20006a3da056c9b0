"""
Friendly item-type names and their canonical Zotero equivalents.
"""

ITEM_TYPE_MAP: dict[str, str] = {
    "article": "journalArticle",
    "journal": "journalArticle",
    "book": "book",
    "chapter": "bookSection",
    "conference": "conferencePaper",
    "thesis": "thesis",
    "report": "report",
    "webpage": "webpage",
    "blog": "blogPost",
    "news": "newspaperArticle",
    "magazine": "magazineArticle",
    "document": "document",
    "legal": "statute",
    "case": "case",
    "patent": "patent",
    "video": "videoRecording",
    "podcast": "podcast",
    "presentation": "presentation",
}


def resolve_item_type(name: str) -> str:
    """
    Map a friendly type name to its canonical Zotero type.

    Lookup is case-insensitive. Unknown names, including canonical ones,
    are returned unchanged.

    Examples:
        >>> resolve_item_type("Article")
        'journalArticle'
        >>> resolve_item_type("preprint")
        'preprint'
    """
    return ITEM_TYPE_MAP.get(name.lower(), name)


def list_item_types() -> list[str]:
    """Friendly type names accepted by ``resolve_item_type``."""
    return list(ITEM_TYPE_MAP)
