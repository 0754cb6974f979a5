from typing import Dict, List, Set
from logging_config import get_logger

logger = get_logger(__name__)


class RoomStore:
    """In-memory mapping of room id -> set of member connection ids.

    A room exists only while it has members: removing the last member
    deletes the room. Callers are responsible for serializing access.
    """

    def __init__(self):
        self.rooms: Dict[str, Set[str]] = {}
        logger.debug("Initialized empty RoomStore")

    def has_room(self, room_id: str) -> bool:
        return room_id in self.rooms

    def get_users_in_room(self, room_id: str) -> Set[str]:
        """Get a copy of the connection IDs in a room (empty if the room does not exist)."""
        return set(self.rooms.get(room_id, ()))

    def count_users_in_room(self, room_id: str) -> int:
        return len(self.rooms.get(room_id, ()))

    def is_member(self, room_id: str, connection_id: str) -> bool:
        members = self.rooms.get(room_id)
        return members is not None and connection_id in members

    def add_user_to_room(self, room_id: str, connection_id: str) -> bool:
        """Add a connection to a room, creating the room if needed."""
        members = self.rooms.setdefault(room_id, set())
        if connection_id in members:
            logger.debug(f"User {connection_id} already exists in room {room_id}")
            return False
        members.add(connection_id)
        logger.debug(f"User {connection_id} added to room {room_id} ({len(members)} members)")
        return True

    def remove_user_from_room(self, room_id: str, connection_id: str) -> Set[str]:
        """Remove a connection from a room and return the remaining members.

        The room is deleted when it becomes empty.
        """
        members = self.rooms.get(room_id)
        if members is None:
            return set()
        members.discard(connection_id)
        if not members:
            self.delete_room(room_id)
            return set()
        return set(members)

    def delete_room(self, room_id: str):
        if self.rooms.pop(room_id, None) is not None:
            logger.info(f"Room {room_id} deleted as it became empty")

    def rooms_for_connection(self, connection_id: str) -> List[str]:
        return [room_id for room_id, members in self.rooms.items() if connection_id in members]

    def __len__(self) -> int:
        return len(self.rooms)
