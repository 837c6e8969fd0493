import httpx
import pytest
from fastapi.testclient import TestClient

from connectors.explorer_connector import ExplorerConnector, ExplorerSession
from explorer.seed import initial_tree
from explorer.store import TreeStore
from explorer_server.daemon import create_app


@pytest.fixture
def connector():
    """Connector wired to an in-process daemon app."""
    client = TestClient(create_app(TreeStore(root=initial_tree())))
    session = ExplorerSession("http://testserver", client=client)
    session.connect()
    yield ExplorerConnector(session)
    session.disconnect()


def test_status(connector):
    status = connector.status
    assert status.status == "ok"
    assert status.files == 8


def test_list_and_get(connector):
    names = [child.name for child in connector.list_folder()]
    assert names == ["Documents", "Images", "readme.txt", "Test Folder"]
    node = connector.get_node("file-deep")
    assert node.name == "deep-file.js"
    assert node.parentId == "folder-deep"
    assert not node.is_folder
    assert connector.get_folder("folder-2").is_folder


def test_create_rename_move_delete(connector):
    folder_id = connector.create_folder("root", "Inbox")
    file_id = connector.create_file(folder_id, "todo.txt")
    assert [c.id for c in connector.list_folder(folder_id)] == [file_id]

    connector.rename(file_id, "done.txt")
    assert connector.get_node(file_id).name == "done.txt"

    connector.move(file_id, "folder-3")
    assert connector.get_node(file_id).parentId == "folder-3"
    assert connector.path(file_id).display == "Test Folder / done.txt"

    connector.delete(folder_id)
    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        connector.get_node(folder_id)
    assert excinfo.value.response.status_code == 404


def test_upload(connector):
    file_id = connector.upload_file("folder-2", "icon.gif", b"GIF89a", content_type="image/gif")
    node = connector.get_node(file_id)
    assert node.size == 6
    assert node.data.startswith("data:image/gif;base64,")


def test_refusals_raise(connector):
    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        connector.create_folder("root", "documents")
    assert excinfo.value.response.status_code == 409
    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        connector.delete("root")
    assert excinfo.value.response.status_code == 403
    with pytest.raises(httpx.HTTPStatusError):
        connector.rename("file-1", "bad*name")


def test_search_and_recent(connector):
    hits = connector.search("report")
    assert [hit.node.id for hit in hits] == ["file-1"]
    assert hits[0].parentPath == "Documents / report.pdf"
    assert connector.search("") == []
    assert [n.id for n in connector.recent(limit=1)] == ["file-6"]


def test_session_not_alive():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(refuse))
    session = ExplorerSession("http://127.0.0.1:1", client=client)
    assert not session.is_alive
    with pytest.raises(ConnectionError):
        session.connect()
