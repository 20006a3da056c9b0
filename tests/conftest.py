import copy
import itertools
from unittest.mock import AsyncMock

import pytest

from zotero_assistant.clients.fetcher import FetchedResource, SourceFetcher
from zotero_assistant.clients.web_api import ZoteroWebAPI
from zotero_assistant.clients.zotero_client import LibraryRef, ZoteroAPIClient
from zotero_assistant.models.fulltext import FulltextRecord
from zotero_assistant.services.library_service import LibraryService
from zotero_assistant.settings import ZoteroSettings
from zotero_assistant.utils.errors import (
    ConflictError,
    InvalidItemTypeError,
    NotFoundError,
)

JOURNAL_ARTICLE_TEMPLATE = {
    "itemType": "journalArticle",
    "title": "",
    "creators": [{"creatorType": "author", "firstName": "", "lastName": ""}],
    "abstractNote": "",
    "publicationTitle": "",
    "volume": "",
    "issue": "",
    "pages": "",
    "date": "",
    "DOI": "",
    "url": "",
    "extra": "",
    "tags": [],
    "collections": [],
    "relations": {},
}

WEBPAGE_TEMPLATE = {
    "itemType": "webpage",
    "title": "",
    "creators": [{"creatorType": "author", "firstName": "", "lastName": ""}],
    "abstractNote": "",
    "websiteTitle": "",
    "websiteType": "",
    "date": "",
    "url": "",
    "accessDate": "",
    "extra": "",
    "tags": [],
    "collections": [],
    "relations": {},
}

NOTE_TEMPLATE = {"itemType": "note", "note": "", "tags": [], "collections": [], "relations": {}}

TEMPLATES = {
    "journalArticle": JOURNAL_ARTICLE_TEMPLATE,
    "webpage": WEBPAGE_TEMPLATE,
    "note": NOTE_TEMPLATE,
}


def write_response(key: str) -> dict:
    """Store reply for one successfully created object."""
    return {
        "successful": {"0": {"key": key, "version": 1, "data": {"key": key}}},
        "success": {"0": key},
        "unchanged": {},
        "failed": {},
    }


def fetched(
    content: bytes,
    content_type: str = "application/pdf",
    url: str = "https://example.org/paper.pdf",
    content_disposition: str = "",
) -> FetchedResource:
    return FetchedResource(
        url=url,
        final_url=url,
        status_code=200,
        content_type=content_type,
        content_disposition=content_disposition,
        content=content,
        text=content.decode("utf-8", errors="replace"),
    )


@pytest.fixture
def item_templates():
    """Templates as served by the store, keyed by item type."""
    return copy.deepcopy(TEMPLATES)


@pytest.fixture
def make_fetched():
    """Factory for fetched source responses."""
    return fetched


@pytest.fixture
def library():
    """A user library reference."""
    return LibraryRef(api_key="test-key", library_id="12345", library_type="user")


@pytest.fixture
def test_settings():
    return ZoteroSettings(api_key="test-key", library_id="12345")


@pytest.fixture
def mock_api_client():
    """Fixture for ZoteroAPIClient mock."""
    mock = AsyncMock(spec=ZoteroAPIClient)
    mock.get_item_template.side_effect = lambda item_type: copy.deepcopy(
        TEMPLATES[item_type]
    )
    mock.create_items.return_value = write_response("ITEM0001")
    return mock


@pytest.fixture
def mock_web_api(library):
    """Fixture for ZoteroWebAPI mock."""
    mock = AsyncMock(spec=ZoteroWebAPI)
    mock.library = library
    mock.upload_file.return_value = {"exists": False, "md5": "abc"}
    mock.get_fulltext.return_value = None
    return mock


@pytest.fixture
def mock_fetcher():
    """Fixture for SourceFetcher mock returning a small PDF."""
    mock = AsyncMock(spec=SourceFetcher)
    mock.fetch.return_value = fetched(b"%PDF-1.4 test")
    return mock


# -------------------- In-memory store --------------------


class FakeZoteroStore:
    """
    In-memory stand-in for ZoteroAPIClient.

    Keeps items with versions and enforces version-conditioned writes the
    way the Web API does.
    """

    def __init__(self):
        self.items: dict[str, dict] = {}
        self.collections: dict[str, dict] = {}
        self.library_version = 0
        self._keys = (f"K{n:07d}" for n in itertools.count(1))
        self.calls: list[str] = []

    def _next_version(self) -> int:
        self.library_version += 1
        return self.library_version

    async def get_item_template(self, item_type):
        self.calls.append("get_item_template")
        if item_type not in TEMPLATES:
            raise InvalidItemTypeError(item_type, "Invalid item type")
        return copy.deepcopy(TEMPLATES[item_type])

    async def create_items(self, payload):
        self.calls.append("create_items")
        successful = {}
        for index, data in enumerate(payload):
            key = next(self._keys)
            version = self._next_version()
            stored = {**copy.deepcopy(data), "key": key, "version": version}
            self.items[key] = {"key": key, "version": version, "data": stored}
            successful[str(index)] = {"key": key, "version": version, "data": stored}
        return {
            "successful": successful,
            "success": {i: v["key"] for i, v in successful.items()},
            "unchanged": {},
            "failed": {},
        }

    async def get_item(self, item_key):
        self.calls.append("get_item")
        if item_key not in self.items:
            raise NotFoundError(f"Item not found: {item_key}")
        return copy.deepcopy(self.items[item_key])

    async def get_item_children(self, item_key):
        self.calls.append("get_item_children")
        return [
            copy.deepcopy(item)
            for item in self.items.values()
            if item["data"].get("parentItem") == item_key
        ]

    async def update_item(self, item_key, version, patch):
        self.calls.append("update_item")
        item = self.items[item_key]
        if item["version"] != version:
            raise ConflictError(item_key, version)
        new_version = self._next_version()
        item["data"].update(copy.deepcopy(patch))
        item["data"]["version"] = new_version
        item["version"] = new_version

    async def get_top_items(self, **params):
        self.calls.append("get_top_items")
        top = [
            copy.deepcopy(i)
            for i in self.items.values()
            if not i["data"].get("parentItem")
        ]
        limit = params.get("limit", len(top))
        return top[:limit], len(top)

    async def get_collection_top_items(self, collection_key, **params):
        self.calls.append("get_collection_top_items")
        top = [
            copy.deepcopy(i)
            for i in self.items.values()
            if collection_key in i["data"].get("collections", [])
        ]
        return top, len(top)

    async def get_collections(self):
        self.calls.append("get_collections")
        return list(self.collections.values())

    async def create_collection(self, name, parent_key=None):
        self.calls.append("create_collection")
        key = next(self._keys)
        self.collections[key] = {
            "key": key,
            "data": {"key": key, "name": name, "parentCollection": parent_key or False},
        }
        return write_response(key)

    def close(self):
        pass


class FakeWebAPI:
    """In-memory stand-in for ZoteroWebAPI."""

    def __init__(self, library):
        self.library = library
        self.files: dict[str, bytes] = {}
        self.fulltext: dict[str, FulltextRecord] = {}

    async def get_fulltext(self, item_key):
        return self.fulltext.get(item_key)

    async def get_tags(self, limit=100, start=0):
        return [], 0

    async def upload_file(self, item_key, filename, content, content_type):
        self.files[item_key] = content
        return {"exists": False, "md5": "fake"}

    async def close(self):
        pass


@pytest.fixture
def fake_store():
    return FakeZoteroStore()


@pytest.fixture
def fake_web_api(library):
    return FakeWebAPI(library)


@pytest.fixture
def fake_service(library, test_settings, fake_store, fake_web_api, mock_fetcher):
    """LibraryService wired to the in-memory store."""
    return LibraryService(
        library,
        config=test_settings,
        api_client=fake_store,
        web_api=fake_web_api,
        fetcher=mock_fetcher,
    )
