"""
Live channel WebSocket endpoint.
"""
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query, status

from hirelocal.api.deps import resolve_user
from hirelocal.core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


@router.websocket("/ws")
async def live_socket(websocket: WebSocket, token: str = Query(None)):
    """
    Register the socket for the token's user and keep it open.
    The server pushes JSON; a client "ping" gets {"type": "pong"}.
    """
    async with websocket.app.state.session_factory() as session:
        try:
            user = await resolve_user(token, session)
        except UnauthorizedError as e:
            logger.warning(f"Rejected live connection: {e.message}")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        user_id = user.id

    manager = websocket.app.state.live_channel
    await manager.connect(user_id, websocket)
    try:
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.debug(f"Live socket for user {user_id} closed by client")
    finally:
        manager.disconnect(user_id, websocket)
