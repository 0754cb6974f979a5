import json

from transport import ConnectionRegistry


class FakeWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(text))


async def wait_written(registry, connection_id):
    await registry.connections[connection_id].queue.join()


async def test_emit_delivers_in_order():
    registry = ConnectionRegistry()
    ws = FakeWebSocket()
    registry.register("a", ws)

    registry.emit("a", "room-joined", {"success": True, "roomId": "x"})
    registry.emit("a", "new-peer", {"peerId": "b"})
    await wait_written(registry, "a")

    assert ws.sent == [
        {"event": "room-joined", "data": {"success": True, "roomId": "x"}},
        {"event": "new-peer", "data": {"peerId": "b"}},
    ]
    await registry.unregister("a")


async def test_emit_to_unknown_connection_is_noop():
    registry = ConnectionRegistry()
    registry.emit("ghost", "offer", {"offer": {}, "senderId": "a"})
    assert "ghost" not in registry.connections


async def test_send_failures_are_swallowed():
    registry = ConnectionRegistry()
    ws = FakeWebSocket(fail=True)
    registry.register("a", ws)

    registry.emit("a", "offer", {})
    registry.emit("a", "answer", {})
    await wait_written(registry, "a")

    assert ws.sent == []
    assert "a" in registry.connections
    await registry.unregister("a")


async def test_full_queue_drops_new_frames():
    registry = ConnectionRegistry(max_queue_size=2)
    ws = FakeWebSocket()
    registry.register("a", ws)

    # The writer task has not run yet, so the third frame finds the queue full
    registry.emit("a", "offer", {"n": 1})
    registry.emit("a", "offer", {"n": 2})
    registry.emit("a", "offer", {"n": 3})
    await wait_written(registry, "a")

    assert [frame["data"]["n"] for frame in ws.sent] == [1, 2]

    registry.emit("a", "offer", {"n": 4})
    await wait_written(registry, "a")
    assert ws.sent[-1]["data"] == {"n": 4}
    await registry.unregister("a")


async def test_unregister_stops_delivery():
    registry = ConnectionRegistry()
    ws = FakeWebSocket()
    registry.register("a", ws)

    await registry.unregister("a")
    registry.emit("a", "offer", {})
    await registry.unregister("a")

    assert "a" not in registry.connections
    assert ws.sent == []
