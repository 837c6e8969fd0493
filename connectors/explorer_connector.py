from typing import Any

import httpx
from box import Box


class NodeInfo(Box):
    """
    Dot-access view of a node document returned by the explorer daemon.
    Examples:
        node = connector.get_node("file-1")
        print(node.name)          # report.pdf
        print(node["parentId"])   # folder-1
    """

    @property
    def is_folder(self) -> bool:
        return self.get("type") == "folder"


##### Sessions #####
class ExplorerSession:
    """
    A session against a running explorer daemon. Uses the REST API.

    Args:
        host_URL (str): The base URL of the daemon.
            Must include scheme (http:// or https://) and optionally port.
            Examples: "http://127.0.0.1:8000"
        client (httpx.Client | None): Pre-built client to use instead of
            opening a new one (for example a FastAPI TestClient).
    """
    def __init__(self, host_URL: str, client: httpx.Client | None = None):
        self.base_URL = host_URL.rstrip("/")
        self._client = client if client is not None else httpx.Client(base_url=self.base_URL)

    def request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """
        Make an HTTP request to the daemon.
        raise_for_status() is called on the response.

        Args:
            method (str): The HTTP method (GET, POST, PATCH, DELETE).
            endpoint (str): The API endpoint (path) to call.
            **kwargs: Additional arguments to pass to httpx request.
            example: session.request("GET", "/search", params={"q": "report"})

        Returns:
            httpx.Response: The HTTP response object.
        """
        url = f"{self.base_URL}/{endpoint.lstrip('/')}"
        response = self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    @property
    def is_alive(self) -> bool:
        """Check if the daemon answers on /status."""
        try:
            resp = self.request("GET", "/status", timeout=2)
            return resp.status_code == 200
        except httpx.HTTPError:
            return False

    def connect(self):
        if not self.is_alive:
            raise ConnectionError(f"Cannot connect to explorer daemon at {self.base_URL}")

    def disconnect(self):
        self._client.close()


##### Connector #####

class ExplorerConnector:
    """ High level client for the explorer daemon.
    Every method returns plain data (NodeInfo / lists / ids) and lets
    httpx.HTTPStatusError propagate on refused operations."""

    def __init__(self, session: ExplorerSession):
        self.session = session
        self.request = self.session.request  # "alias" Now self.request(...) is the same as self.session.request(...)

    @property
    def status(self) -> Box:
        return Box(self.request("GET", "/status").json())

    def get_folder(self, folder_id: str = "root") -> NodeInfo:
        return NodeInfo(self.request("GET", f"/folders/{folder_id}").json())

    def get_node(self, node_id: str) -> NodeInfo:
        return NodeInfo(self.request("GET", f"/nodes/{node_id}").json())

    def list_folder(self, folder_id: str = "root") -> list[NodeInfo]:
        return [NodeInfo(child) for child in self.get_folder(folder_id).get("children", [])]

    def create_folder(self, parent_id: str, name: str) -> str:
        r = self.request("POST", f"/folders/{parent_id}", json={"name": name})
        return r.json()["folderId"]

    def create_file(self, parent_id: str, name: str) -> str:
        """Create an empty text file by name."""
        r = self.request("POST", f"/files/{parent_id}", data={"name": name})
        return r.json()["fileId"]

    def upload_file(self, parent_id: str, file_name: str, content: bytes,
                    content_type: str = "application/octet-stream", name: str | None = None) -> str:
        data: dict[str, Any] = {"name": name} if name else {}
        files = {"file": (file_name, content, content_type)}
        r = self.request("POST", f"/files/{parent_id}", files=files, data=data)
        return r.json()["fileId"]

    def rename(self, node_id: str, new_name: str) -> None:
        self.request("PATCH", f"/nodes/{node_id}", json={"name": new_name})

    def move(self, node_id: str, target_id: str) -> None:
        self.request("POST", f"/nodes/{node_id}/move", json={"targetId": target_id})

    def delete(self, node_id: str) -> None:
        self.request("DELETE", f"/nodes/{node_id}")

    def path(self, node_id: str) -> Box:
        return Box(self.request("GET", f"/nodes/{node_id}/path").json())

    def search(self, query: str, limit: int | None = None) -> list[Box]:
        params: dict[str, Any] = {"q": query}
        if limit is not None:
            params["limit"] = limit
        r = self.request("GET", "/search", params=params)
        return [Box(hit) for hit in r.json()]

    def recent(self, limit: int | None = None) -> list[NodeInfo]:
        params = {"limit": limit} if limit is not None else {}
        r = self.request("GET", "/recent", params=params)
        return [NodeInfo(node) for node in r.json()]
