"""Tests for the pyzotero wrapper and its error translation."""

from unittest.mock import MagicMock, patch

import httpx
from pyzotero import zotero_errors
import pytest

from zotero_assistant.clients.zotero_client import (
    LibraryRef,
    ZoteroAPIClient,
    created_key,
    get_library_ref,
    translate_zotero_error,
)
from zotero_assistant.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    InvalidItemTypeError,
    NotFoundError,
    RemoteRejection,
    TransportError,
)


@pytest.fixture
def client(library):
    api_client = ZoteroAPIClient(library)
    api_client._client = MagicMock()
    return api_client


def test_library_prefix():
    assert LibraryRef("k", "123").prefix == "users/123"
    assert LibraryRef("k", "99", "group").prefix == "groups/99"


# -------------------- Error translation --------------------


def test_translate_transport_errors():
    timeout = translate_zotero_error(httpx.ReadTimeout("slow"), "Get item X")
    assert isinstance(timeout, TransportError)
    assert str(timeout) == "Get item X: request timed out"

    reset = translate_zotero_error(httpx.ConnectError("refused"), "Get item X")
    assert isinstance(reset, TransportError)


def test_translate_auth_and_not_found():
    auth = translate_zotero_error(zotero_errors.UserNotAuthorised("nope"), "List")
    assert isinstance(auth, AuthenticationError)

    missing = translate_zotero_error(zotero_errors.ResourceNotFound("gone"), "Get item X")
    assert isinstance(missing, NotFoundError)


def test_translate_rejection_keeps_status_and_body():
    error = zotero_errors.HTTPError(
        "\nCode: 413\nURL: https://api.zotero.org/users/1/items\n"
        "Method: POST\nResponse: Request entity too large"
    )

    rejection = translate_zotero_error(error, "Create items")

    assert isinstance(rejection, RemoteRejection)
    assert rejection.status_code == 413
    assert rejection.body == "Request entity too large"
    assert str(rejection) == "Create items: HTTP 413 Request entity too large"


def test_translate_rate_limit_status_from_class():
    rejection = translate_zotero_error(zotero_errors.TooManyRequests("slow down"), "Search")

    assert isinstance(rejection, RemoteRejection)
    assert rejection.status_code == 429


# -------------------- Write responses --------------------


def test_created_key_from_successful_map():
    response = {"successful": {"0": {"key": "ABCD1234"}}, "success": {}, "failed": {}}
    assert created_key(response, "Create") == "ABCD1234"


def test_created_key_from_legacy_success_map():
    assert created_key({"success": {"0": "ABCD1234"}}, "Create") == "ABCD1234"


def test_created_key_failed_entry():
    response = {
        "successful": {},
        "success": {},
        "failed": {"0": {"code": 400, "message": "'foo' is not a valid field"}},
    }

    with pytest.raises(RemoteRejection) as excinfo:
        created_key(response, "Failed to create item")

    assert excinfo.value.status_code == 400
    assert "'foo' is not a valid field" in str(excinfo.value)


def test_created_key_bare_status():
    with pytest.raises(RemoteRejection) as excinfo:
        created_key(500, "Failed to create item")

    assert excinfo.value.status_code == 500


# -------------------- Client methods --------------------


@pytest.mark.asyncio
async def test_get_item_template_rejects_unknown_type(client):
    client._client.item_template.side_effect = zotero_errors.UnsupportedParams(
        "Code: 400\nResponse: Invalid item type 'bogusType'"
    )

    with pytest.raises(InvalidItemTypeError) as excinfo:
        await client.get_item_template("bogusType")

    assert excinfo.value.item_type == "bogusType"
    assert excinfo.value.store_message == "Invalid item type 'bogusType'"


@pytest.mark.asyncio
async def test_get_item_not_found(client):
    client._client.item.side_effect = zotero_errors.ResourceNotFound("Code: 404")

    with pytest.raises(NotFoundError, match="Item not found: MISSING1"):
        await client.get_item("MISSING1")


@pytest.mark.asyncio
async def test_update_item_sends_version(client):
    await client.update_item("ITEM0001", 7, {"title": "New"})

    client._client.update_item.assert_called_once_with(
        {"title": "New", "key": "ITEM0001", "version": 7}
    )


@pytest.mark.asyncio
async def test_update_item_precondition_failed_is_conflict(client):
    client._client.update_item.side_effect = zotero_errors.PreConditionFailed(
        "Code: 412"
    )

    with pytest.raises(ConflictError) as excinfo:
        await client.update_item("ITEM0001", 3, {"title": "New"})

    assert excinfo.value.item_key == "ITEM0001"
    assert excinfo.value.version == 3


@pytest.mark.asyncio
async def test_get_top_items_reads_total_results(library):
    """Test that the count comes from the instance that made the request."""
    zot = MagicMock()
    zot.top.return_value = [{"key": "A"}]
    zot.request.headers = {"Total-Results": "314"}

    with patch("zotero_assistant.clients.zotero_client.zotero.Zotero", return_value=zot):
        items, total = await ZoteroAPIClient(library).get_top_items(limit=1, q="x")

    zot.top.assert_called_once_with(limit=1, q="x")
    assert items == [{"key": "A"}]
    assert total == 314


@pytest.mark.asyncio
async def test_get_collections_follows_pagination(library):
    zot = MagicMock()
    zot.everything.return_value = [{"key": "C1"}, {"key": "C2"}]

    with patch("zotero_assistant.clients.zotero_client.zotero.Zotero", return_value=zot):
        collections = await ZoteroAPIClient(library).get_collections()

    zot.everything.assert_called_once_with(zot.collections.return_value)
    assert len(collections) == 2


@pytest.mark.asyncio
async def test_create_collection_payload(client):
    client._client.create_collections.return_value = {"successful": {"0": {"key": "C9"}}}

    await client.create_collection("Sub", parent_key="C1")

    client._client.create_collections.assert_called_once_with(
        [{"name": "Sub", "parentCollection": "C1"}]
    )


# -------------------- Configuration --------------------


def test_get_library_ref_requires_api_key(monkeypatch):
    monkeypatch.setenv("ZOTERO_API_KEY", "")
    monkeypatch.setenv("ZOTERO_LIBRARY_ID", "123")

    with patch("zotero_assistant.clients.zotero_client.load_config"):
        with pytest.raises(ConfigurationError, match="ZOTERO_API_KEY"):
            get_library_ref()


def test_get_library_ref_rejects_bad_type(monkeypatch):
    monkeypatch.setenv("ZOTERO_API_KEY", "k")
    monkeypatch.setenv("ZOTERO_LIBRARY_ID", "123")
    monkeypatch.setenv("ZOTERO_LIBRARY_TYPE", "team")

    with patch("zotero_assistant.clients.zotero_client.load_config"):
        with pytest.raises(ConfigurationError, match="ZOTERO_LIBRARY_TYPE"):
            get_library_ref()


def test_get_library_ref(monkeypatch):
    monkeypatch.setenv("ZOTERO_API_KEY", "k")
    monkeypatch.setenv("ZOTERO_LIBRARY_ID", "99")
    monkeypatch.setenv("ZOTERO_LIBRARY_TYPE", "group")

    with patch("zotero_assistant.clients.zotero_client.load_config"):
        library = get_library_ref()

    assert library == LibraryRef(api_key="k", library_id="99", library_type="group")


def test_new_client_uses_base_url_and_timeout(library):
    """Test that every pyzotero instance talks to the configured host."""
    api_client = ZoteroAPIClient(
        library, base_url="https://zotero.example.org/", timeout=12.5
    )

    with patch("zotero_assistant.clients.zotero_client.zotero.Zotero") as zotero_cls:
        zot = api_client._new_client()

    http_client = zotero_cls.call_args.kwargs["client"]
    assert http_client is api_client._http
    assert http_client.timeout == httpx.Timeout(12.5)
    assert zot.endpoint == "https://zotero.example.org"
    api_client.close()


@pytest.mark.asyncio
async def test_get_item_children_uses_its_own_instance(client):
    """Test that children and the item itself never share one pyzotero instance."""
    children_zot = MagicMock()
    children_zot.children.return_value = [{"key": "ATT00001"}]

    with patch.object(client, "_new_client", return_value=children_zot):
        children = await client.get_item_children("ITEM0001")

    assert children == [{"key": "ATT00001"}]
    client._client.children.assert_not_called()
