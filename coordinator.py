import asyncio
from typing import List, Optional, Set

from constants import ROOM_CAPACITY
from errors import DisconnectResult, JoinResult, LeaveResult, RelayResult, SignalingErrorKind
from logging_config import get_logger
from room_store import RoomStore
from schemas.signaling import Connect, Disconnect, JoinRoom, LeaveRoom, RelayMessage, SignalingMessage
from transport import Transport

logger = get_logger(__name__)


class SignalingCoordinator:
    """Tracks room membership and relays signaling between the peers of a room.

    Every operation runs under a single lock so that capacity checks,
    membership changes and the notifications they trigger are atomic with
    respect to other connections. Outbound events go through
    ``transport.emit`` which must not block.
    """

    def __init__(self, transport: Transport, store: Optional[RoomStore] = None,
                 capacity: int = ROOM_CAPACITY, strict_relay_targets: bool = False):
        self.transport = transport
        self.store = store if store is not None else RoomStore()
        self.capacity = capacity
        self.strict_relay_targets = strict_relay_targets
        self._lock = asyncio.Lock()

    async def handle(self, message: SignalingMessage):
        """Dispatch one inbound message variant to its operation."""
        if isinstance(message, Connect):
            return await self.on_connect(message.connection_id)
        if isinstance(message, Disconnect):
            return await self.on_disconnect(message.connection_id)
        if isinstance(message, JoinRoom):
            return await self.join_room(message.connection_id, message.room_id)
        if isinstance(message, LeaveRoom):
            return await self.leave_room(message.connection_id, message.room_id)
        if isinstance(message, RelayMessage):
            return await self.relay(message)
        raise TypeError(f"Unsupported signaling message: {type(message).__name__}")

    async def on_connect(self, connection_id: str):
        logger.info(f"Client connected: {connection_id}")

    async def on_disconnect(self, connection_id: str) -> DisconnectResult:
        logger.info(f"Client disconnected: {connection_id}")
        async with self._lock:
            # Scan every room rather than trusting the one-room invariant
            rooms_left = self.store.rooms_for_connection(connection_id)
            for room_id in rooms_left:
                self._remove_member(room_id, connection_id)
        return DisconnectResult(rooms_left=rooms_left)

    async def join_room(self, connection_id: str, room_id) -> JoinResult:
        if not room_id or not isinstance(room_id, str):
            return JoinResult(error=SignalingErrorKind.INVALID_ROOM_ID)

        async with self._lock:
            if self.store.is_member(room_id, connection_id):
                logger.info(f"Client {connection_id} re-joined room {room_id}")
                self.transport.emit(connection_id, "room-joined", {"success": True, "roomId": room_id})
                return JoinResult(room_id=room_id)

            if self.store.count_users_in_room(room_id) >= self.capacity:
                return JoinResult(room_id=room_id, error=SignalingErrorKind.ROOM_FULL)

            # A connection belongs to at most one room: leave the old one only once the new join is certain
            left_room = None
            for previous_room in self.store.rooms_for_connection(connection_id):
                logger.info(f"Client {connection_id} leaving room {previous_room} to join {room_id}")
                self._remove_member(previous_room, connection_id)
                left_room = previous_room

            peers = sorted(self.store.get_users_in_room(room_id))
            self.store.add_user_to_room(room_id, connection_id)
            logger.info(f"Client {connection_id} joined room {room_id}")
            self.transport.emit(connection_id, "room-joined", {"success": True, "roomId": room_id})

            for peer_id in peers:
                self.transport.emit(peer_id, "new-peer", {"peerId": connection_id})
                self.transport.emit(connection_id, "new-peer", {"peerId": peer_id})

        return JoinResult(room_id=room_id, peers=peers, left_room=left_room)

    async def leave_room(self, connection_id: str, room_id) -> LeaveResult:
        if not room_id or not isinstance(room_id, str):
            return LeaveResult(error=SignalingErrorKind.INVALID_ROOM_ID)

        async with self._lock:
            if not self.store.is_member(room_id, connection_id):
                return LeaveResult(room_id=room_id, error=SignalingErrorKind.NOT_ROOM_PARTICIPANT)
            self._remove_member(room_id, connection_id)
            logger.info(f"Client {connection_id} left room {room_id}")
            self.transport.emit(connection_id, "room-left", {"success": True, "roomId": room_id})
        return LeaveResult(room_id=room_id)

    async def relay(self, message: RelayMessage) -> RelayResult:
        result = RelayResult(kind=message.kind, target_peer_id=message.target_peer_id)
        async with self._lock:
            if not isinstance(message.room_id, str) or not self.store.is_member(message.room_id, message.connection_id):
                result.error = SignalingErrorKind.NOT_ROOM_PARTICIPANT
                return result
            if not message.target_peer_id or not isinstance(message.target_peer_id, str):
                result.error = SignalingErrorKind.INVALID_PAYLOAD
                return result
            if self.strict_relay_targets and not self.store.is_member(message.room_id, message.target_peer_id):
                result.error = SignalingErrorKind.TARGET_NOT_IN_ROOM
                return result
            self.transport.emit(message.target_peer_id, message.kind, {
                message.payload_field: message.payload,
                "senderId": message.connection_id,
            })
        logger.debug(f"Relayed {message.kind} from {message.connection_id} to {message.target_peer_id} in room {message.room_id}")
        return result

    def _remove_member(self, room_id: str, connection_id: str) -> Set[str]:
        remaining = self.store.remove_user_from_room(room_id, connection_id)
        for peer_id in remaining:
            self.transport.emit(peer_id, "peer-disconnected", {"peerId": connection_id})
        return remaining

    async def room_snapshot(self, room_id: str) -> Optional[List[str]]:
        """Sorted members of a room, or None if the room does not exist."""
        async with self._lock:
            if not self.store.has_room(room_id):
                return None
            return sorted(self.store.get_users_in_room(room_id))

    async def room_count(self) -> int:
        async with self._lock:
            return len(self.store)
