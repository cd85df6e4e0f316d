from storefront.core.websocket import ConnectionManager, build_message
from storefront.services.notification import PRODUCTS_UPDATED, ProductBroadcaster
from storefront.services.product_service import PRODUCT_ADDED

class FakeSocket:
    def __init__(self, fail=False):
        self.fail = fail
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(message)

def test_build_message_envelope():
    message = build_message("productAdded", {"id": 1})

    assert message["type"] == "productAdded"
    assert message["data"] == {"id": 1}
    assert isinstance(message["timestamp"], str)

async def test_connect_and_disconnect():
    connections = ConnectionManager()
    socket = FakeSocket()

    await connections.connect(socket)
    assert socket.accepted
    assert len(connections) == 1

    connections.disconnect(socket)
    connections.disconnect(socket)
    assert len(connections) == 0

async def test_broadcast_drops_failing_subscribers():
    connections = ConnectionManager()
    healthy, broken = FakeSocket(), FakeSocket(fail=True)
    await connections.connect(healthy)
    await connections.connect(broken)

    delivered = await connections.broadcast("productDeleted", 3)

    assert delivered == 1
    assert healthy.sent[0]["data"] == 3
    assert len(connections) == 1

async def test_personal_message_reaches_one_subscriber():
    connections = ConnectionManager()
    first, second = FakeSocket(), FakeSocket()
    await connections.connect(first)
    await connections.connect(second)

    assert await connections.send_personal_message(first, "error", {"message": "nope"})

    assert first.sent[0]["type"] == "error"
    assert second.sent == []

async def test_broadcaster_sends_listing_then_change():
    connections = ConnectionManager()
    socket = FakeSocket()
    await connections.connect(socket)

    await ProductBroadcaster(connections)(PRODUCT_ADDED, [{"id": 1}], {"id": 1})

    assert [m["type"] for m in socket.sent] == [PRODUCTS_UPDATED, PRODUCT_ADDED]
    assert socket.sent[0]["data"] == [{"id": 1}]

async def test_broadcaster_without_subscribers_is_a_no_op():
    await ProductBroadcaster(ConnectionManager())(PRODUCT_ADDED, [], {"id": 1})

def test_timestamps_are_timezone_aware_utc():
    message = build_message(PRODUCT_ADDED, {"id": 1})

    assert message["timestamp"].endswith("+00:00")
