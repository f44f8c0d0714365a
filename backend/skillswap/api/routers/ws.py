import json
import logging

from fastapi import APIRouter, Query, WebSocket
from starlette.websockets import WebSocketDisconnect

from skillswap.core.relay import now_ms, relay
from skillswap.core.security import user_id_from_token
from skillswap.models.user import User

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

AUTH_FAILED_CODE = 4001


async def _identify(token: str | None) -> User | None:
    if not token:
        return None
    try:
        user_id = user_id_from_token(token)
    except Exception:
        return None
    user = await User.get_or_none(id=user_id)
    if not user or user.is_banned:
        return None
    return user


@router.websocket("/ws")
async def ws_notifications(ws: WebSocket, token: str | None = Query(default=None)):
    """
    WebSocket endpoint for live notifications.

    Message flow:
    1. Client connects to /ws?token=<access token>
    2. Server replies {"type": "connected", "userId": ...}, or sends an error
       and closes with 4001 when the token does not identify an active user
    3. Server pushes {"type": "notification", ...} events and periodic
       {"type": "ping"} probes
    4. Client may send {"type": "ping"} (answered with "pong") and answers
       probes with {"type": "pong"}; any frame counts as a sign of life

    Note:
        One connection per user; a newer connection closes the older one.
    """
    await ws.accept()
    user = await _identify(token)
    if user is None:
        await ws.send_text(json.dumps({"type": "error", "message": "Authentication failed"}))
        await ws.close(code=AUTH_FAILED_CODE, reason="Authentication failed")
        return

    await relay.register(user.id, ws)
    await ws.send_text(json.dumps({"type": "connected", "userId": user.id}))
    try:
        while True:
            pkt = await ws.receive()
            if pkt["type"] == "websocket.disconnect":
                break
            relay.mark_alive(user.id, ws)
            try:
                # Binary frames have no "text" key and count as malformed
                msg = json.loads(pkt["text"])
                kind = msg.get("type")
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("[ws] malformed frame from user %s", user.id)
                await ws.send_text(json.dumps({"type": "error", "message": "Failed to process message"}))
                continue
            if kind == "ping":
                await ws.send_text(json.dumps({"type": "pong", "timestamp": now_ms()}))
            elif kind == "pong":
                pass  # Heartbeat reply, already recorded
            else:
                logger.warning("[ws] unknown message type from user %s: %r", user.id, kind)
    except WebSocketDisconnect:
        pass
    except RuntimeError:
        pass  # Closed from our side (replaced, banned or evicted)
    finally:
        await relay.unregister(user.id, ws)
