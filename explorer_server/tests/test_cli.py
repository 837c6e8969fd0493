import pytest
from fastapi.testclient import TestClient
from typer.testing import CliRunner

from connectors.explorer_connector import ExplorerConnector, ExplorerSession
from explorer.seed import initial_tree
from explorer.store import TreeStore
from explorer_server.cli import app
from explorer_server.daemon import create_app

runner = CliRunner()


@pytest.fixture
def tree():
    return TreeStore(root=initial_tree())


@pytest.fixture
def obj(tree, tmp_path, monkeypatch):
    """Context object carrying a connector bound to an in-process daemon."""
    monkeypatch.setenv("HOME", str(tmp_path))
    session = ExplorerSession("http://testserver", client=TestClient(create_app(tree)))
    return {"connector": ExplorerConnector(session)}


def test_help():
    """Test the help command displays usage information."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_ls(obj):
    result = runner.invoke(app, ["ls", "folder-1"], obj=obj)
    assert result.exit_code == 0, result.output
    assert "report.pdf" in result.output
    assert "Nested Folder" in result.output


def test_tree(obj):
    result = runner.invoke(app, ["tree"], obj=obj)
    assert result.exit_code == 0, result.output
    assert "deep-file.js" in result.output
    assert "My Files" in result.output


def test_mkdir_touch_rename_mv_rm(obj, tree):
    result = runner.invoke(app, ["mkdir", "root", "Inbox"], obj=obj)
    assert result.exit_code == 0, result.output
    folder = tree.search_nodes("inbox")[0]

    result = runner.invoke(app, ["touch", folder.id, "todo.txt"], obj=obj)
    assert result.exit_code == 0, result.output
    file_id = tree.search_nodes("todo.txt")[0].id

    assert runner.invoke(app, ["rename", file_id, "done.txt"], obj=obj).exit_code == 0
    assert tree.find_file(file_id).name == "done.txt"

    assert runner.invoke(app, ["mv", file_id, "folder-3"], obj=obj).exit_code == 0
    assert tree.find_file(file_id).parent_id == "folder-3"

    assert runner.invoke(app, ["rm", folder.id], obj=obj).exit_code == 0
    assert tree.find_node(folder.id) is None


def test_refused_operations_exit_non_zero(obj, tree):
    assert runner.invoke(app, ["rm", "root"], obj=obj).exit_code == 1
    assert runner.invoke(app, ["mkdir", "root", "documents"], obj=obj).exit_code == 1
    assert runner.invoke(app, ["rename", "ghost", "x"], obj=obj).exit_code == 1
    assert runner.invoke(app, ["ls", "ghost"], obj=obj).exit_code == 1
    assert tree.find_folder("folder-1").name == "Documents"


def test_search_and_recent(obj):
    result = runner.invoke(app, ["search", "report"], obj=obj)
    assert result.exit_code == 0
    assert "file-1" in result.output
    result = runner.invoke(app, ["search", "zzz-nothing"], obj=obj)
    assert "No matches" in result.output
    result = runner.invoke(app, ["recent", "--limit", "1"], obj=obj)
    assert result.exit_code == 0
    assert "test.txt" in result.output


def test_list_servers(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    result = runner.invoke(app, ["list-servers"])
    assert result.exit_code == 0
    assert "No running explorer daemons found." in result.output or '"pid"' in result.output


def test_kill_server_missing_pid():
    """Test kill-server with missing PID argument (should error)."""
    result = runner.invoke(app, ["kill-server"])
    assert result.exit_code != 0
