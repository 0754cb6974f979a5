from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import RoomDetailsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request):
    """
    Get the current occupancy of a room.

    Returns:
    - room_id: Room identifier
    - max_users: Room capacity
    - online_users_count: Number of connections in the room
    - online_users: Connection IDs in the room
    - is_full: Whether the room has reached capacity
    """
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room details request for {room_id} from {client_host}")

    coordinator = request.app.state.coordinator
    members = await coordinator.room_snapshot(room_id)
    if members is None:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    logger.info(f"Room details retrieved for {room_id}: {len(members)}/{coordinator.capacity} users online")

    return RoomDetailsResponse(
        room_id=room_id,
        max_users=coordinator.capacity,
        online_users_count=len(members),
        online_users=members,
        is_full=len(members) >= coordinator.capacity,
    )
