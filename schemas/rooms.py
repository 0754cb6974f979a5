from pydantic import BaseModel
from typing import List


class RoomDetailsResponse(BaseModel):
    room_id: str
    max_users: int
    online_users_count: int
    online_users: List[str]
    is_full: bool


class HealthResponse(BaseModel):
    status: str
    rooms: int
    connections: int
