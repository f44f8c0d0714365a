# skillswap/core/relay.py
"""
Notification relay for pushing events to signed-in browser sessions.

Each user holds at most one live WebSocket. A newer connection for the same
user replaces (and closes) the older one. Liveness is tracked with an
application-level heartbeat: every cycle, connections that have not sent any
frame since the previous cycle are closed and dropped, and the rest receive a
`{"type": "ping"}` probe they are expected to answer.
"""
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from starlette.websockets import WebSocket

logger = logging.getLogger("uvicorn.error")

NOTIFICATION_TYPES = ("success", "error", "info", "warning")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Connection:
    ws: WebSocket
    alive: bool = True  # Cleared by every sweep, set again by any inbound frame


class NotificationRelay:
    """
    Registry of live notification sockets keyed by user id.

    The router is responsible for ws.accept() and the receive loop; this class
    only tracks connections and delivers messages. Send failures never reach
    the caller: the broken connection is dropped instead.

    Data structure:
    - _conns: Dict[user_id, Connection]
    """
    def __init__(self):
        self._conns: Dict[int, Connection] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._conns)

    def is_connected(self, user_id: int) -> bool:
        return user_id in self._conns

    # -------- registration --------
    async def register(self, user_id: int, ws: WebSocket) -> None:
        """
        Register a socket as the user's live connection.

        Args:
            user_id: Authenticated user id announced by the socket
            ws: Accepted WebSocket connection

        Note: A previous connection for the same user is closed with code 1000.
        """
        async with self._lock:
            previous = self._conns.get(user_id)
            self._conns[user_id] = Connection(ws=ws)
        if previous is not None and previous.ws is not ws:
            logger.info("[relay] replacing connection for user %s", user_id)
            await self._close(previous.ws, 1000, "New connection established")
        logger.info("[relay] user %s connected (%d online)", user_id, len(self._conns))

    async def unregister(self, user_id: int, ws: WebSocket) -> None:
        """Drop the user's entry, but only if `ws` is still the current connection."""
        async with self._lock:
            current = self._conns.get(user_id)
            if current is not None and current.ws is ws:
                del self._conns[user_id]
                logger.info("[relay] user %s disconnected", user_id)

    async def disconnect(self, user_id: int, code: int = 1000, reason: str = "") -> bool:
        """Close and forget the user's connection. Returns False if there was none."""
        async with self._lock:
            conn = self._conns.pop(user_id, None)
        if conn is None:
            return False
        await self._close(conn.ws, code, reason)
        return True

    def mark_alive(self, user_id: int, ws: WebSocket) -> None:
        conn = self._conns.get(user_id)
        if conn is not None and conn.ws is ws:
            conn.alive = True

    # -------- delivery --------
    async def send_to(self, user_id: int, event: dict) -> bool:
        """
        Send a JSON event to one user.

        Returns:
            True if delivered; False if the user has no live connection or the send failed
        """
        conn = self._conns.get(user_id)
        if conn is None:
            return False
        try:
            await conn.ws.send_text(json.dumps(event))
            return True
        except Exception as e:
            logger.info("[relay] dropping connection for user %s after send failure: %r", user_id, e)
            await self.unregister(user_id, conn.ws)
            return False

    async def notify(
        self,
        user_id: int,
        notification_type: str,
        title: str,
        message: str,
        details: Optional[Any] = None,
    ) -> bool:
        """Send a `{"type": "notification", ...}` event to one user."""
        return await self.send_to(user_id, build_notification(notification_type, title, message, details))

    async def broadcast(self, event: dict) -> int:
        """
        Best-effort fan-out to every live connection.

        Returns:
            Number of connections the event was delivered to
        """
        delivered = 0
        for user_id in list(self._conns):
            if await self.send_to(user_id, event):
                delivered += 1
        return delivered

    # -------- heartbeat --------
    async def sweep(self) -> int:
        """
        Run one heartbeat cycle.

        Connections that stayed silent since the previous cycle are closed
        (1001) and removed; the rest are marked pending and probed with a ping.

        Returns:
            Number of evicted connections
        """
        async with self._lock:
            stale = [(uid, c) for uid, c in self._conns.items() if not c.alive]
            for uid, _ in stale:
                del self._conns[uid]
            live = list(self._conns.items())
            for _, c in live:
                c.alive = False

        for uid, c in stale:
            logger.info("[relay] terminating stale connection for user %s", uid)
            await self._close(c.ws, 1001, "Heartbeat timeout")

        probe = {"type": "ping", "timestamp": now_ms()}
        for uid, _ in live:
            await self.send_to(uid, probe)
        return len(stale)

    async def run_heartbeat(self, interval: float) -> None:
        """Sweep forever every `interval` seconds; cancel the task to stop."""
        while True:
            await asyncio.sleep(interval)
            await self.sweep()

    async def close_all(self, code: int = 1001, reason: str = "Server shutting down") -> None:
        async with self._lock:
            conns = list(self._conns.values())
            self._conns.clear()
        for c in conns:
            await self._close(c.ws, code, reason)

    @staticmethod
    async def _close(ws: WebSocket, code: int, reason: str) -> None:
        try:
            await ws.close(code=code, reason=reason)
        except Exception:
            pass  # Already closed


def build_notification(notification_type: str, title: str, message: str, details: Optional[Any] = None) -> dict:
    if notification_type not in NOTIFICATION_TYPES:
        notification_type = "info"
    event = {
        "type": "notification",
        "notificationType": notification_type,
        "title": title,
        "message": message,
    }
    if details is not None:
        event["details"] = details
    return event


# Global relay instance (singleton pattern)
# Import this instance in other modules to push notifications
relay = NotificationRelay()
