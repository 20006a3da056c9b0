"""
Clients for Zotero Assistant.

- ZoteroAPIClient: item and collection CRUD via pyzotero
- ZoteroWebAPI: full text, tags, groups and file transfer via httpx
- SourceFetcher: PDF and HTML downloads from arbitrary URLs
"""

from .fetcher import FetchedResource, SourceFetcher
from .web_api import ZoteroWebAPI
from .zotero_client import LibraryRef, ZoteroAPIClient, created_key, get_library_ref

__all__ = [
    "FetchedResource",
    "LibraryRef",
    "SourceFetcher",
    "ZoteroAPIClient",
    "ZoteroWebAPI",
    "created_key",
    "get_library_ref",
]
