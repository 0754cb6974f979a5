from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class SignalingErrorKind(str, Enum):
    """Caller-facing errors. None of them are fatal to the server."""

    INVALID_ROOM_ID = "Invalid room ID"
    ROOM_FULL = "Room is full"
    NOT_ROOM_PARTICIPANT = "Not a room participant"
    TARGET_NOT_IN_ROOM = "Target peer is not in the room"
    INVALID_PAYLOAD = "Invalid signaling payload"

    @property
    def message(self) -> str:
        return self.value


@dataclass
class JoinResult:
    room_id: Optional[str] = None
    error: Optional[SignalingErrorKind] = None
    # Existing members the caller was paired with
    peers: List[str] = field(default_factory=list)
    # Room the caller was moved out of, if any
    left_room: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LeaveResult:
    room_id: Optional[str] = None
    error: Optional[SignalingErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RelayResult:
    kind: str
    target_peer_id: Optional[str] = None
    error: Optional[SignalingErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DisconnectResult:
    rooms_left: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True
