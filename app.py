from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from routers.rooms import rooms_router
from schemas.rooms import HealthResponse
from schemas.signaling import (
    RELAY_MESSAGES,
    Connect,
    Disconnect,
    InboundFrame,
    JoinRoom,
    LeaveRoom,
    RelayPayload,
    relay_message_from_payload,
)
from coordinator import SignalingCoordinator
from transport import ConnectionRegistry
from errors import SignalingErrorKind
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, STRICT_RELAY_TARGETS
from logging_config import get_logger, setup_logging
from typing import Optional
import uuid

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

RELAY_ERROR_LABELS = {
    "offer": "Offer",
    "answer": "Answer",
    "ice-candidate": "ICE candidate",
}


def _room_id_from(data):
    # join-room / leave-room carry the bare room id; {"roomId": ...} is accepted too
    if isinstance(data, dict):
        return data.get("roomId")
    return data


async def handle_frame(coordinator: SignalingCoordinator, registry: ConnectionRegistry, connection_id: str, raw: str):
    """Parse one text frame from a client and dispatch it to the coordinator.

    Error kinds returned by the coordinator are translated into the named
    error event for the originating connection here.
    """
    try:
        frame = InboundFrame.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Malformed frame from connection {connection_id}: {e.error_count()} validation errors")
        registry.emit(connection_id, "signaling-error", {"error": SignalingErrorKind.INVALID_PAYLOAD.message})
        return

    if frame.event in ("join-room", "leave-room"):
        room_id = _room_id_from(frame.data)
        if frame.event == "join-room":
            result = await coordinator.handle(JoinRoom(connection_id=connection_id, room_id=room_id))
            label = "Join room"
        else:
            result = await coordinator.handle(LeaveRoom(connection_id=connection_id, room_id=room_id))
            label = "Leave room"
        if not result.ok:
            logger.error(f"{label} error: {result.error.message} (connection {connection_id}, room {room_id!r})")
            registry.emit(connection_id, "room-error", {"error": result.error.message})
        return

    if frame.event in RELAY_MESSAGES:
        label = RELAY_ERROR_LABELS[frame.event]
        # Non-object data carries no roomId, so the sender fails the membership check
        payload = RelayPayload.model_validate(frame.data if isinstance(frame.data, dict) else {})
        result = await coordinator.handle(relay_message_from_payload(frame.event, connection_id, payload))
        if not result.ok:
            logger.error(f"{label} error: {result.error.message} (connection {connection_id}, room {payload.room_id!r})")
            registry.emit(connection_id, "signaling-error", {"error": result.error.message})
        return

    logger.warning(f"Unknown event '{frame.event}' from connection {connection_id}")
    registry.emit(connection_id, "signaling-error", {"error": f"Unknown event: {frame.event}"})


def create_app(coordinator: Optional[SignalingCoordinator] = None,
               registry: Optional[ConnectionRegistry] = None) -> FastAPI:
    if registry is None:
        registry = coordinator.transport if coordinator is not None else ConnectionRegistry()
    if coordinator is None:
        coordinator = SignalingCoordinator(registry, strict_relay_targets=STRICT_RELAY_TARGETS)

    app = FastAPI(title="WebRTC signaling relay")
    app.state.coordinator = coordinator
    app.state.registry = registry

    # Configure CORS for browser clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(rooms_router)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            status="ok",
            rooms=await coordinator.room_count(),
            connections=len(registry.connections),
        )

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Signaling channel: one JSON {event, data} frame per text message."""
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        registry.register(connection_id, websocket)
        await coordinator.handle(Connect(connection_id=connection_id))
        registry.emit(connection_id, "connected", {"connectionId": connection_id})

        try:
            message_count = 0
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info(f"WebSocket disconnected normally for connection {connection_id}")
                    break
                raw = message.get("text")
                if raw is None:
                    logger.warning(f"Binary frame from connection {connection_id} ignored")
                    registry.emit(connection_id, "signaling-error", {"error": SignalingErrorKind.INVALID_PAYLOAD.message})
                    continue
                message_count += 1
                logger.debug(f"Received message #{message_count} from connection {connection_id}")
                await handle_frame(coordinator, registry, connection_id, raw)
        except Exception as e:
            logger.error(f"WebSocket error for connection {connection_id}: {e}", exc_info=True)
        finally:
            await coordinator.handle(Disconnect(connection_id=connection_id))
            await registry.unregister(connection_id)

    logger.info("FastAPI application initialized")
    return app


app = create_app()
