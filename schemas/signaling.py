from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class InboundFrame(BaseModel):
    """A named event as sent by a client: {"event": "...", "data": ...}"""
    event: str
    data: Any = None


class OutboundFrame(BaseModel):
    event: str
    data: Any = None


class RelayPayload(BaseModel):
    """Wire payload for offer / answer / ice-candidate events.

    The session description and candidate blobs are never inspected.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    room_id: Any = Field(None, alias="roomId")
    # Checked by the coordinator after sender membership
    target_peer_id: Any = Field(None, alias="targetPeerId")
    offer: Any = None
    answer: Any = None
    candidate: Any = None


# Message variants handled by SignalingCoordinator.handle()

class Connect(BaseModel):
    kind: Literal["connect"] = "connect"
    connection_id: str


class Disconnect(BaseModel):
    kind: Literal["disconnect"] = "disconnect"
    connection_id: str


class JoinRoom(BaseModel):
    kind: Literal["join-room"] = "join-room"
    connection_id: str
    # Left untyped so that non-string ids reach the coordinator and fail as INVALID_ROOM_ID
    room_id: Any = None


class LeaveRoom(BaseModel):
    kind: Literal["leave-room"] = "leave-room"
    connection_id: str
    room_id: Any = None


class RelayMessage(BaseModel):
    # Name of the data field carrying the opaque payload on the wire
    payload_field: ClassVar[str]

    connection_id: str
    room_id: Any = None
    target_peer_id: Any = None
    payload: Any = None


class Offer(RelayMessage):
    payload_field: ClassVar[str] = "offer"
    kind: Literal["offer"] = "offer"


class Answer(RelayMessage):
    payload_field: ClassVar[str] = "answer"
    kind: Literal["answer"] = "answer"


class IceCandidate(RelayMessage):
    payload_field: ClassVar[str] = "candidate"
    kind: Literal["ice-candidate"] = "ice-candidate"


SignalingMessage = Annotated[
    Union[Connect, Disconnect, JoinRoom, LeaveRoom, Offer, Answer, IceCandidate],
    Field(discriminator="kind"),
]

RELAY_MESSAGES = {
    "offer": Offer,
    "answer": Answer,
    "ice-candidate": IceCandidate,
}


def relay_message_from_payload(kind: str, connection_id: str, payload: RelayPayload) -> RelayMessage:
    message_cls = RELAY_MESSAGES[kind]
    return message_cls(
        connection_id=connection_id,
        room_id=payload.room_id,
        target_peer_id=payload.target_peer_id,
        payload=getattr(payload, message_cls.payload_field),
    )
