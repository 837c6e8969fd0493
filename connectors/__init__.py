"""HTTP connectors for talking to a running explorer daemon."""

from .explorer_connector import ExplorerConnector, ExplorerSession, NodeInfo

__all__ = ["ExplorerConnector", "ExplorerSession", "NodeInfo"]
