"""WebSocket stream of player sync events."""

from __future__ import annotations

import asyncio
import contextlib

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from loguru import logger

from coachsync.sync.manager import SyncEvent, SyncManager

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/players/{player_id}")
async def player_updates(websocket: WebSocket, player_id: str) -> None:
    """Stream matches_updated / player_updated events until the client disconnects."""
    await websocket.accept()
    manager: SyncManager = websocket.app.state.sync_manager
    queue: asyncio.Queue[SyncEvent] = asyncio.Queue()
    subscription_id = manager.subscribe_to_player(player_id, queue.put_nowait)
    logger.info(f"[API] WebSocket subscribed {subscription_id}")

    async def forward() -> None:
        while True:
            event = await queue.get()
            await websocket.send_json(jsonable_encoder(event.to_dict()))

    sender = asyncio.create_task(forward())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"[API] WebSocket disconnected {subscription_id}")
    finally:
        manager.unsubscribe(subscription_id)
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
