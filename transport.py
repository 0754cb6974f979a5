import asyncio
import json
from typing import Any, Dict, Optional, Protocol

from fastapi import WebSocket

from constants import OUTBOUND_QUEUE_SIZE
from logging_config import get_logger
from schemas.signaling import OutboundFrame

logger = get_logger(__name__)


class Transport(Protocol):
    def emit(self, connection_id: str, event: str, data: Any) -> None:
        ...


class _Connection:
    def __init__(self, connection_id: str, websocket: WebSocket, max_queue_size: int):
        self.connection_id = connection_id
        self.websocket = websocket
        self.queue: "asyncio.Queue[dict]" = asyncio.Queue(maxsize=max_queue_size)
        self.writer: Optional[asyncio.Task] = None


class ConnectionRegistry:
    """Addressable handle for each live WebSocket connection.

    emit() never awaits: frames are queued per connection and written by a
    dedicated task, so callers can emit while holding a lock and frames to
    one connection keep their order.
    """

    def __init__(self, max_queue_size: int = OUTBOUND_QUEUE_SIZE):
        self.connections: Dict[str, _Connection] = {}
        self.max_queue_size = max_queue_size

    def register(self, connection_id: str, websocket: WebSocket):
        connection = _Connection(connection_id, websocket, self.max_queue_size)
        connection.writer = asyncio.create_task(self._write_loop(connection))
        self.connections[connection_id] = connection
        logger.debug(f"Registered connection {connection_id} ({len(self.connections)} live)")

    async def unregister(self, connection_id: str):
        connection = self.connections.pop(connection_id, None)
        if connection is None:
            return
        if connection.writer:
            connection.writer.cancel()
            try:
                await connection.writer
            except asyncio.CancelledError:
                pass
        logger.debug(f"Unregistered connection {connection_id} ({len(self.connections)} live)")

    def emit(self, connection_id: str, event: str, data: Any) -> None:
        connection = self.connections.get(connection_id)
        if connection is None:
            # Stale or unknown target: delivery silently no-ops
            logger.debug(f"Dropping '{event}' for unknown connection {connection_id}")
            return
        frame = OutboundFrame(event=event, data=data)
        try:
            connection.queue.put_nowait(frame.model_dump())
        except asyncio.QueueFull:
            logger.warning(f"Outbound queue full for connection {connection_id}, dropping '{event}'")

    async def _write_loop(self, connection: _Connection):
        while True:
            message = await connection.queue.get()
            try:
                await connection.websocket.send_text(json.dumps(message))
                logger.debug(f"Sent '{message['event']}' to connection {connection.connection_id}")
            except Exception as e:
                logger.warning(f"Error sending '{message['event']}' to connection {connection.connection_id}: {e}")
            finally:
                connection.queue.task_done()
