# connections_manager.py
"""
connections_manager.py
----------------------
Manages connections to explorer daemons.

Holds in-memory sessions keyed by daemon URL and reuses them when possible.
"""

from connectors.explorer_connector import ExplorerConnector, ExplorerSession

######################### Sessions #########################

# variable to hold active sessions, keyed by base URL
_active_sessions: dict[str, ExplorerSession] = {}


def get_session(host_URL: str) -> ExplorerSession:
    """
    Get or create a session for the daemon at host_URL.
    A new session is checked with connect() before being cached.
    """
    key = host_URL.rstrip("/")
    if key in _active_sessions:
        return _active_sessions[key]

    session = ExplorerSession(key)
    try:
        session.connect()
    except ConnectionError:
        session.disconnect()
        raise
    _active_sessions[key] = session
    return session


def get_connector(host_URL: str) -> ExplorerConnector:
    return ExplorerConnector(get_session(host_URL))


def close_all() -> None:
    for session in _active_sessions.values():
        session.disconnect()
    _active_sessions.clear()
