"""Registry of live chat connections, one per user."""

import threading

from fastapi import WebSocket

_active_connections: dict[str, WebSocket] = {}
_lock = threading.Lock()


def register(user_id: str, websocket: WebSocket) -> WebSocket | None:
    """Track a user's connection; returns the connection it replaced, if any."""
    with _lock:
        previous = _active_connections.get(user_id)
        _active_connections[user_id] = websocket
    return previous if previous is not websocket else None


def unregister(user_id: str, websocket: WebSocket) -> bool:
    """Forget a connection unless a newer one has already replaced it."""
    with _lock:
        if _active_connections.get(user_id) is websocket:
            del _active_connections[user_id]
            return True
    return False


def get_active_connections() -> dict[str, WebSocket]:
    """Snapshot of user id -> connection."""
    with _lock:
        return dict(_active_connections)
