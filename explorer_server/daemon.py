"""
explorer_server.daemon
----------------------
This module exposes a TreeStore over a small REST API using FastAPI.
It provides endpoints to browse folders, create files and folders,
rename, move and delete nodes, search by name and list recent files.
The tree lives in process memory and is optionally persisted as one
JSON document.
"""
import base64
import json
import logging
import os
import socket
import sys
from pathlib import PurePosixPath

import typer
import uvicorn
from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from common.app_setup import setup_logging
from explorer import config
from explorer.errors import ErrorKind, OperationResult
from explorer.file_types import get_file_extension, is_image_name
from explorer.models import node_to_document
from explorer.seed import load_seed_file
from explorer.storage import JsonFileStorage
from explorer.store import TreeStore
from explorer.validation import validate_file_size

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.PROTECTED: 403,
}


class NameModel(BaseModel):
    name: str | None = None


class MoveModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_id: str = Field(..., min_length=1, alias="targetId")


def build_store() -> TreeStore:
    """Create the store described by the EXPLORER_* environment variables."""
    seed = load_seed_file(config.SEED_FILE) if config.SEED_FILE else None
    if config.DATA_FILE:
        return TreeStore.open(JsonFileStorage(config.DATA_FILE), seed=seed)
    return TreeStore(root=seed)


def sanitize_file_name(raw_name: str) -> str:
    """Strip any directory components a client may have sent."""
    return PurePosixPath(raw_name.replace("\\", "/")).name


def _raise_for_result(result: OperationResult) -> None:
    if result.success:
        return
    kind = result.kind or ErrorKind.VALIDATION
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(kind, 400),
        detail={"error": result.error, "kind": kind.value},
    )


def _store(request: Request) -> TreeStore:
    return request.app.state.store


def create_app(store: TreeStore | None = None) -> FastAPI:
    """Build the REST app around ``store`` (a fresh demo store if omitted)."""
    api = FastAPI(title="File Explorer")
    api.state.store = store if store is not None else build_store()
    api.state.uvicorn_server = None

    @api.post("/shutdown")
    def shutdown(request: Request):
        """Shutdown the server gracefully."""
        logger.info("Shutdown requested via /shutdown endpoint.")
        server = request.app.state.uvicorn_server
        if server:
            server.should_exit = True
        return {"message": "Server shutting down"}

    @api.get("/status")
    def status(request: Request):
        """Health/status endpoint."""
        server = request.app.state.uvicorn_server
        state = "shutting_down" if server and server.should_exit else "ok"
        tree = _store(request)
        return {"status": state, "nodes": tree.count_nodes(), "files": len(tree.get_all_files())}

    @api.get("/folders/{folder_id}")
    def get_folder(folder_id: str, request: Request):
        folder = _store(request).find_folder(folder_id)
        if folder is None:
            logger.warning(f"Folder not found: {folder_id}")
            raise HTTPException(status_code=404, detail="Folder not found")
        return node_to_document(folder)

    @api.post("/folders/{folder_id}", status_code=201)
    def create_folder(folder_id: str, body: NameModel, request: Request):
        """Create a subfolder. The name is trimmed before validation."""
        if not isinstance(body.name, str) or not body.name.strip():
            raise HTTPException(status_code=400, detail="Invalid folder name")
        result = _store(request).create_folder(folder_id, body.name.strip())
        _raise_for_result(result)
        return {"success": True, "folderId": result.node_id}

    @api.post("/files/{folder_id}", status_code=201)
    async def create_file(
        folder_id: str,
        request: Request,
        file: UploadFile | None = File(None),
        name: str | None = Form(None),
    ):
        """
        Upload a file, or create an empty text file when only a name is sent.
        A custom name without an extension keeps the uploaded file's extension.
        Images are inlined as base64 data URLs.
        """
        tree = _store(request)
        if tree.find_folder(folder_id) is None:
            raise HTTPException(status_code=404, detail="Parent folder not found")

        custom_name = name.strip() if name else ""
        if file is not None:
            if custom_name:
                extension = get_file_extension(file.filename or "")
                raw_name = custom_name if "." in custom_name or not extension else f"{custom_name}.{extension}"
            else:
                raw_name = file.filename or ""
        elif custom_name:
            raw_name = custom_name
        else:
            raise HTTPException(status_code=400, detail="Either file or name must be provided")

        file_name = sanitize_file_name(raw_name)
        if not file_name:
            raise HTTPException(status_code=400, detail="Invalid file name")

        size = None
        data = None
        if file is not None:
            content = await file.read()
            size = len(content)
            size_check = validate_file_size(size)
            if not size_check.is_valid:
                raise HTTPException(status_code=413, detail=size_check.message())
            content_type = file.content_type or ""
            if is_image_name(file_name) or content_type.startswith("image/"):
                encoded = base64.b64encode(content).decode("ascii")
                data = f"data:{content_type or 'application/octet-stream'};base64,{encoded}"

        result = tree.create_file(folder_id, file_name, size=size, data=data)
        _raise_for_result(result)
        return {"success": True, "fileId": result.node_id}

    @api.get("/nodes/{node_id}")
    def get_node(node_id: str, request: Request):
        node = _store(request).find_node(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail="Node not found")
        return node_to_document(node)

    @api.patch("/nodes/{node_id}")
    def rename_node(node_id: str, body: NameModel, request: Request):
        if not isinstance(body.name, str):
            raise HTTPException(status_code=400, detail="Missing 'name' field")
        result = _store(request).rename_node(node_id, body.name)
        _raise_for_result(result)
        return {"success": True}

    @api.delete("/nodes/{node_id}", status_code=204)
    def delete_node(node_id: str, request: Request):
        result = _store(request).delete_node(node_id)
        _raise_for_result(result)

    @api.post("/nodes/{node_id}/move")
    def move_node(node_id: str, body: MoveModel, request: Request):
        result = _store(request).move_node(node_id, body.target_id)
        _raise_for_result(result)
        return {"success": True}

    @api.get("/nodes/{node_id}/path")
    def node_path(node_id: str, request: Request):
        tree = _store(request)
        trail = tree.get_node_path(node_id)
        if trail is None:
            raise HTTPException(status_code=404, detail="Node not found")
        return {
            "path": [{"id": folder.id, "name": folder.name} for folder in trail],
            "display": tree.get_display_path(node_id),
        }

    @api.get("/search")
    def search(request: Request, q: str = "", limit: int = config.MAX_SEARCH_RESULTS):
        """Search nodes by name. Each hit carries its display path."""
        tree = _store(request)
        hits = tree.search_nodes(q, limit=limit)
        logger.debug(f"Search {q!r}: {len(hits)} hit(s)")
        return [
            {"node": node_to_document(node), "parentPath": tree.get_display_path(node.id), "matchType": "name"}
            for node in hits
        ]

    @api.get("/recent")
    def recent(request: Request, limit: int = config.RECENT_FILES_LIMIT):
        return [node_to_document(node) for node in _store(request).get_recent_files(limit)]

    return api


app = create_app()

app_cli = typer.Typer()


@app_cli.command()
def run(
    port: int = typer.Option(None, help="Port to run the server on (auto if not set)"),
    host: str = typer.Option(config.EXPLORER_HOST, help="Interface to bind"),
):
    """Run the FastAPI app using Uvicorn, reporting the actual port used."""
    setup_logging(app_name="explorer", daemon=True, logfile=config.LOGFILE)
    if port is None or port == 0:
        # Bind to port 0 to get a free port, then close and reuse
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((host, 0))
            port = s.getsockname()[1]
        logger.info(f"Selected port: {port}")
        print(json.dumps({"event": "port_selected", "port": port}), flush=True)
    else:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind((host, port))
            except OSError:
                logger.error(f"Port {port} is already in use.")
                sys.exit(98)  # 98 = EADDRINUSE
        logger.info(f"Using port: {port}")
        print(json.dumps({"event": "port_used", "port": port}), flush=True)
    uv_config = uvicorn.Config(app, host=host, port=port, log_level="info")
    server = uvicorn.Server(uv_config)
    app.state.uvicorn_server = server  # Store server instance for shutdown
    logger.info(f"Starting Uvicorn server on {host}:{port}")
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt in main thread")
    logger.info("Server stopped, exiting process")
    os._exit(0)


if __name__ == "__main__":
    app_cli()
