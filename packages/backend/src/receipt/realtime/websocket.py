"""WebSocket endpoint — live entry feed for front-end clients.

Learn: Each client connects to /api/ws. The handler:
1. Accepts and registers the socket with the BroadcastHub
2. Echoes every inbound text frame back to that socket only
3. Unregisters in `finally`, so any way out of the loop
   (clean close, network drop, server shutdown) leaves the hub clean

New entries arrive via hub.broadcast(), not from this loop.
"""

import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from receipt.realtime.hub import BroadcastHub

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/api/ws")
async def entries_websocket(websocket: WebSocket):
    hub: BroadcastHub = websocket.app.state.hub

    await websocket.accept()
    await hub.subscribe(websocket)
    logger.info("receipt.ws_connected", client=str(websocket.client))

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            data = message.get("text")
            if data is None:
                data = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            logger.debug("receipt.ws_received", size=len(data))
            await websocket.send_text(json.dumps({"message": f"You sent: {data}"}))
    except WebSocketDisconnect as e:
        logger.info("receipt.ws_disconnected", code=e.code)
    finally:
        await hub.unsubscribe(websocket)
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()
