"""
This file is the entry point for the 'explorer' command-line tool.
It talks to a running explorer daemon over its REST API.
Run 'explorer --help' in your shell to see the commands.
"""
import json
import os
import signal

import httpx
import psutil
import typer
from rich.table import Table
from rich.tree import Tree

from common.app_setup import console, print_and_log, print_error, setup_logging
from connectors.connections_manager import get_connector
from connectors.explorer_connector import ExplorerConnector, NodeInfo
from explorer import config
from explorer.file_types import format_file_size, get_file_type_info

app = typer.Typer(add_completion=False, help="Browse and edit the tree held by an explorer daemon.")

DEFAULT_URL = f"http://{config.EXPLORER_HOST}:{config.EXPLORER_PORT}"


@app.callback()
def main(
    ctx: typer.Context,
    url: str = typer.Option(DEFAULT_URL, envvar="EXPLORER_URL", help="Base URL of the daemon"),
):
    setup_logging(app_name="explorer", daemon=False, logfile=config.LOGFILE)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("url", url)


def _connector(ctx: typer.Context) -> ExplorerConnector:
    connector = ctx.obj.get("connector")
    if connector is None:
        try:
            connector = get_connector(ctx.obj["url"])
        except ConnectionError as e:
            print_error(str(e))
            raise typer.Exit(1)
        ctx.obj["connector"] = connector
    return connector


def _fail(exc: httpx.HTTPStatusError):
    """Print the daemon's refusal and exit non-zero."""
    try:
        detail = exc.response.json().get("detail")
    except ValueError:
        detail = exc.response.text
    if isinstance(detail, dict):
        detail = f"{detail.get('error')} ({detail.get('kind')})"
    print_error(f"{exc.response.status_code}: {detail}")
    raise typer.Exit(1)


def _describe(node: NodeInfo) -> str:
    if node.is_folder:
        return f"📁 {node.name}"
    return f"{get_file_type_info(node.name).icon} {node.name}"


@app.command("ls")
def list_folder(ctx: typer.Context, folder_id: str = typer.Argument("root", help="Folder id")):
    """List a folder's children."""
    try:
        children = _connector(ctx).list_folder(folder_id)
    except httpx.HTTPStatusError as e:
        _fail(e)
    table = Table(title=folder_id)
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    for child in children:
        size = "" if child.is_folder else format_file_size(child.get("size"))
        table.add_row(child.id, _describe(child), size, child.modifiedAt)
    console.print(table)


@app.command("tree")
def show_tree(ctx: typer.Context, folder_id: str = typer.Argument("root", help="Folder id")):
    """Print a folder and everything below it."""
    try:
        folder = _connector(ctx).get_folder(folder_id)
    except httpx.HTTPStatusError as e:
        _fail(e)

    def add(branch: Tree, node: NodeInfo):
        for child in node.get("children", []):
            child = NodeInfo(child)
            sub = branch.add(f"{_describe(child)} [dim]({child.id})[/dim]")
            if child.is_folder:
                add(sub, child)

    root = Tree(f"📁 {folder.name} [dim]({folder.id})[/dim]")
    add(root, folder)
    console.print(root)


@app.command("mkdir")
def make_folder(ctx: typer.Context, parent_id: str, name: str):
    """Create a folder."""
    try:
        folder_id = _connector(ctx).create_folder(parent_id, name)
    except httpx.HTTPStatusError as e:
        _fail(e)
    print_and_log(f"Created folder {name!r} with id {folder_id}")


@app.command("touch")
def make_file(ctx: typer.Context, parent_id: str, name: str):
    """Create an empty text file."""
    try:
        file_id = _connector(ctx).create_file(parent_id, name)
    except httpx.HTTPStatusError as e:
        _fail(e)
    print_and_log(f"Created file {name!r} with id {file_id}")


@app.command("rename")
def rename(ctx: typer.Context, node_id: str, new_name: str):
    """Rename a file or folder."""
    try:
        _connector(ctx).rename(node_id, new_name)
    except httpx.HTTPStatusError as e:
        _fail(e)
    print_and_log(f"Renamed {node_id} to {new_name!r}")


@app.command("mv")
def move(ctx: typer.Context, node_id: str, target_id: str):
    """Move a file or folder into another folder."""
    try:
        _connector(ctx).move(node_id, target_id)
    except httpx.HTTPStatusError as e:
        _fail(e)
    print_and_log(f"Moved {node_id} into {target_id}")


@app.command("rm")
def remove(ctx: typer.Context, node_id: str):
    """Delete a file, or a folder with everything in it."""
    try:
        _connector(ctx).delete(node_id)
    except httpx.HTTPStatusError as e:
        _fail(e)
    print_and_log(f"Deleted {node_id}")


@app.command("search")
def search(ctx: typer.Context, query: str, limit: int = typer.Option(config.MAX_SEARCH_RESULTS, help="Max hits")):
    """Find files and folders whose name contains QUERY."""
    try:
        hits = _connector(ctx).search(query, limit=limit)
    except httpx.HTTPStatusError as e:
        _fail(e)
    if not hits:
        print_and_log(f"No matches for {query!r}")
        return
    for hit in hits:
        console.print(f"{hit.node.id}  {hit.parentPath}")


@app.command("recent")
def recent(ctx: typer.Context, limit: int = typer.Option(10, help="How many files")):
    """Show the most recently modified files."""
    try:
        files = _connector(ctx).recent(limit)
    except httpx.HTTPStatusError as e:
        _fail(e)
    for node in files:
        console.print(f"{node.modifiedAt}  {node.id}  {node.name}")


# List running explorer daemons and their listening ports
@app.command()
def list_servers():
    """List running explorer daemons and their listening ports."""
    found = False
    for proc in psutil.process_iter(['pid', 'name', 'cmdline']):
        try:
            if proc.info['cmdline'] and 'explorer_server.daemon' in ' '.join(proc.info['cmdline']):
                cons = proc.net_connections(kind='inet')
                listen_ports = [c.laddr.port for c in cons if c.status == psutil.CONN_LISTEN]
                print_and_log(json.dumps({"pid": proc.pid, "ports": listen_ports}))
                found = True
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    if not found:
        print_and_log("No running explorer daemons found.")


@app.command()
def stop_server(port: int = typer.Argument(..., help="Port of the server")):
    """Gracefully stop a running server via REST API (localhost only)."""
    url = f"http://127.0.0.1:{port}/shutdown"
    try:
        response = httpx.post(url, timeout=5)
    except httpx.HTTPError as e:
        print_error(f"Error contacting server at 127.0.0.1:{port}: {e}")
        raise typer.Exit(1)
    if response.status_code != 200:
        print_error(f"Failed to stop server at 127.0.0.1:{port}: {response.status_code} {response.text}")
        raise typer.Exit(1)
    print_and_log(f"Server at 127.0.0.1:{port} stopped gracefully.")


@app.command()
def kill_server(pid: int = typer.Argument(..., help="PID of the server process to kill")):
    """Force kill a running server by PID (sends SIGTERM)."""
    try:
        proc = psutil.Process(pid)
        cmdline = ' '.join(proc.cmdline())
    except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
        print_error(f"Failed to kill process {pid}: {e}")
        raise typer.Exit(1)
    if 'explorer_server.daemon' not in cmdline:
        print_error(f"Refusing to kill PID {pid}: not an explorer daemon (cmdline: {cmdline})")
        raise typer.Exit(1)
    os.kill(pid, signal.SIGTERM)
    print_and_log(f"Sent SIGTERM to process {pid}.")


if __name__ == "__main__":
    app()
