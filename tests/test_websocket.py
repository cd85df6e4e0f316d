import json

import pytest

from .conftest import product_data

def test_add_product_is_broadcast_to_every_subscriber(client):
    with client.websocket_connect("/ws/products") as sender, client.websocket_connect("/ws/products") as watcher:
        sender.send_json({"type": "addProduct", "data": product_data(code="LIVE-1")})

        for ws in (sender, watcher):
            updated = ws.receive_json()
            assert updated["type"] == "productsUpdated"
            assert [p["code"] for p in updated["data"]] == ["LIVE-1"]
            assert "timestamp" in updated

            added = ws.receive_json()
            assert added["type"] == "productAdded"
            assert added["data"]["code"] == "LIVE-1"

    assert client.get("/api/products").json()["total_docs"] == 1

def test_delete_product_is_broadcast(client):
    product = client.post("/api/products", json=product_data()).json()["data"]

    with client.websocket_connect("/ws/products") as sender, client.websocket_connect("/ws/products") as watcher:
        sender.send_json({"type": "deleteProduct", "data": product["id"]})

        for ws in (sender, watcher):
            updated = ws.receive_json()
            assert updated["type"] == "productsUpdated"
            assert updated["data"] == []
            deleted = ws.receive_json()
            assert deleted["type"] == "productDeleted"
            assert deleted["data"] == product["id"]

    assert client.get(f"/api/products/{product['id']}").status_code == 404

def test_errors_go_to_the_sender_only(client):
    with client.websocket_connect("/ws/products") as sender, client.websocket_connect("/ws/products") as watcher:
        sender.send_json({"type": "addProduct", "data": {"title": "incomplete"}})

        error = sender.receive_json()
        assert error["type"] == "error"
        assert error["data"]["message"] == "All fields are required and must be valid"

        # The watcher's next message is its own pong, so nothing was queued before it
        watcher.send_json({"type": "ping"})
        assert watcher.receive_json()["type"] == "pong"

    assert client.get("/api/products").json()["total_docs"] == 0

def test_delete_unknown_product_reports_error(client):
    with client.websocket_connect("/ws/products") as ws:
        ws.send_json({"type": "deleteProduct", "data": 404})
        assert ws.receive_json()["data"]["message"] == "Product not found"

        ws.send_json({"type": "deleteProduct", "data": "nope"})
        assert ws.receive_json()["data"]["message"] == "Invalid product ID"

def test_unknown_message_type(client):
    with client.websocket_connect("/ws/products") as ws:
        ws.send_json({"type": "launchRocket"})
        message = ws.receive_json()

    assert message["type"] == "error"
    assert message["data"]["message"] == "Unknown message type: launchRocket"

def test_rest_create_reaches_subscribers(client):
    with client.websocket_connect("/ws/products") as ws:
        client.post("/api/products", json=product_data(code="FROM-REST"))

        assert ws.receive_json()["type"] == "productsUpdated"
        assert ws.receive_json()["data"]["code"] == "FROM-REST"

def test_ping_registers_subscriber(client, connections):
    with client.websocket_connect("/ws/products") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json()["type"] == "pong"
        assert len(connections) == 1

def test_non_finite_price_is_rejected_over_websocket(client):
    body = json.dumps({"type": "addProduct", "data": product_data(price=7.25)})

    with client.websocket_connect("/ws/products") as ws:
        ws.send_text(body.replace('"price": 7.25', '"price": NaN'))
        error = ws.receive_json()

    assert error["type"] == "error"
    assert client.get("/api/products").json()["total_docs"] == 0

def test_subscriber_is_dropped_when_the_handler_fails(client, connections):
    with pytest.raises(Exception):
        with client.websocket_connect("/ws/products") as ws:
            ws.send_json({"type": "ping"})
            assert ws.receive_json()["type"] == "pong"
            assert len(connections) == 1

            # A binary frame on a text channel breaks receive_json on the server
            ws.send_bytes(b"\x00")
            ws.receive_json()

    assert len(connections) == 0
