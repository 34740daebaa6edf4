"""
FastAPI WebSocket server for the ito game.
"""

import asyncio
import logging
import threading
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Tuple

import orjson
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from ..engine import ItoEngine
from ..rules import GameRules
from .events import (
    DrawThemeEvent,
    GoToCommentingEvent,
    GoToRankingEvent,
    JoinEvent,
    KickPlayerEvent,
    PlayCardEvent,
    RestartEvent,
    RevealCardEvent,
    RevealCommentsEvent,
    StartEvent,
    SubmitCommentEvent,
    SubmitRankingEvent,
    UpdateIconEvent,
    UpdateThemeEvent,
    create_outbound_event,
    parse_inbound_event,
)

logger = logging.getLogger(__name__)


class WebSocketTransport:
    """
    Per-connection outbound queues.

    send_to never blocks and may be called from any thread (grace timers fire
    on their own threads); a writer task per connection drains the queue.
    """

    def __init__(self):
        self.connections: Dict[str, Tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = {}
        self._lock = threading.Lock()

    def register(self, connection_id: str) -> asyncio.Queue:
        """Must be called from the event loop serving the connection."""
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self.connections[connection_id] = (asyncio.get_running_loop(), queue)
        return queue

    def unregister(self, connection_id: str):
        with self._lock:
            self.connections.pop(connection_id, None)

    def send_to(self, connection_id: str, event: str, payload: Dict[str, Any]):
        with self._lock:
            entry = self.connections.get(connection_id)
        if entry is None:
            logger.debug(f"Dropping {event} for closed connection {connection_id}")
            return
        loop, queue = entry
        message = create_outbound_event(event, payload)
        try:
            loop.call_soon_threadsafe(queue.put_nowait, message)
        except RuntimeError as e:
            logger.warning(f"Could not queue {event} for {connection_id}: {e}")

    def __len__(self) -> int:
        with self._lock:
            return len(self.connections)


transport = WebSocketTransport()
engine = ItoEngine(transport, rules=GameRules.from_env())


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("ito server starting up")
    yield
    engine.shutdown()
    logger.info("ito server shutting down")


# FastAPI app
app = FastAPI(title="ito Online", version="1.0.0", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "rooms": len(engine.registry),
        "connections": len(transport),
    }


async def _write_loop(websocket: WebSocket, queue: asyncio.Queue, connection_id: str):
    try:
        while True:
            message = await queue.get()
            await websocket.send_text(orjson.dumps(message).decode())
    except Exception as e:
        logger.error(f"Error sending to {connection_id}: {e}")
    finally:
        # Nothing drains the queue once the writer is gone
        transport.unregister(connection_id)


async def _close_connection(connection_id: str, writer: asyncio.Task):
    transport.unregister(connection_id)
    writer.cancel()
    try:
        await writer
    except asyncio.CancelledError:
        pass
    engine.disconnect(connection_id)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Main WebSocket endpoint. One connection id per socket."""
    await websocket.accept()
    connection_id = uuid.uuid4().hex
    queue = transport.register(connection_id)
    writer = asyncio.create_task(_write_loop(websocket, queue, connection_id))
    logger.info(f"User connected: {connection_id}")

    try:
        while True:
            raw_data = await websocket.receive_text()
            try:
                event = parse_inbound_event(orjson.loads(raw_data))
            except ValueError as e:
                logger.warning(f"Dropping malformed event from {connection_id}: {e}")
                continue
            handle_event(connection_id, event)
    except WebSocketDisconnect:
        logger.info(f"User disconnected: {connection_id}")
    except Exception as e:
        logger.error(f"WebSocket error for {connection_id}: {e}")
    finally:
        await _close_connection(connection_id, writer)


def handle_event(connection_id: str, event) -> Optional[Tuple[bool, str]]:
    """Dispatch an inbound event to the engine."""
    room_id = event.room_id

    if isinstance(event, JoinEvent):
        return engine.join_room(room_id, connection_id, event.username, event.icon, event.reconnect)
    elif isinstance(event, StartEvent):
        return engine.start_game(room_id, connection_id)
    elif isinstance(event, GoToCommentingEvent):
        return engine.go_to_commenting(room_id, connection_id)
    elif isinstance(event, SubmitCommentEvent):
        return engine.submit_comment(room_id, connection_id, event.comment)
    elif isinstance(event, RevealCommentsEvent):
        return engine.reveal_comments(room_id, connection_id)
    elif isinstance(event, GoToRankingEvent):
        return engine.go_to_ranking(room_id, connection_id)
    elif isinstance(event, SubmitRankingEvent):
        return engine.submit_ranking(room_id, connection_id, event.ranking)
    elif isinstance(event, RevealCardEvent):
        return engine.reveal_card(room_id, connection_id)
    elif isinstance(event, PlayCardEvent):
        return engine.play_card(room_id, connection_id, event.card)
    elif isinstance(event, UpdateIconEvent):
        return engine.update_icon(room_id, connection_id, event.icon)
    elif isinstance(event, DrawThemeEvent):
        return engine.draw_theme(room_id, connection_id)
    elif isinstance(event, UpdateThemeEvent):
        return engine.update_theme(room_id, connection_id, event.theme)
    elif isinstance(event, KickPlayerEvent):
        return engine.kick_player(room_id, connection_id, event.player_id)
    elif isinstance(event, RestartEvent):
        return engine.restart_game(room_id, connection_id)
    else:
        raise ValueError(f"Unhandled event type: {type(event)}")
