import pytest

from coordinator import SignalingCoordinator
from room_store import RoomStore


class RecordingTransport:
    """Collects emitted events instead of writing to sockets."""

    def __init__(self):
        self.sent = []

    def emit(self, connection_id, event, data):
        self.sent.append((connection_id, event, data))

    def events_for(self, connection_id, event=None):
        return [
            data for target, name, data in self.sent
            if target == connection_id and (event is None or name == event)
        ]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def store():
    return RoomStore()


@pytest.fixture
def coordinator(transport, store):
    return SignalingCoordinator(transport, store=store)
