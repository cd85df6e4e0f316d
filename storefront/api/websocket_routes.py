"""WebSocket route handlers"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from typing import Any
import logging

from storefront.core.exceptions import StorefrontException, ValidationException
from storefront.services.product_service import ProductService
from storefront.utils.dependencies import build_product_service, open_repositories

router = APIRouter()
logger = logging.getLogger(__name__)

async def _add_product(service: ProductService, data: Any) -> None:
    await service.create(data)

async def _delete_product(service: ProductService, data: Any) -> None:
    if isinstance(data, dict):
        data = data.get("id")
    if data is None or not service.products.is_valid_id(data):
        raise ValidationException("Invalid product ID")
    await service.delete(data)

HANDLERS = {
    "addProduct": _add_product,
    "deleteProduct": _delete_product,
}

@router.websocket("/ws/products")
async def products_websocket(websocket: WebSocket):
    """Live product list: receives addProduct / deleteProduct, pushes productsUpdated"""
    manager = websocket.app.state.connections
    await manager.connect(websocket)

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await manager.send_personal_message(websocket, "error", {"message": "Messages must be JSON"})
                continue

            event = message.get("type") if isinstance(message, dict) else None
            if event == "ping":
                await manager.send_personal_message(websocket, "pong")
                continue

            handler = HANDLERS.get(event)
            if handler is None:
                await manager.send_personal_message(
                    websocket, "error", {"message": f"Unknown message type: {event}"}
                )
                continue

            try:
                async with open_repositories(websocket.app) as (products, _):
                    await handler(build_product_service(websocket.app, products), message.get("data"))
            except StorefrontException as e:
                logger.info(f"Rejected {event} from subscriber: {e.detail}")
                await manager.send_personal_message(websocket, "error", {"message": e.detail})

    except WebSocketDisconnect:
        logger.debug("Subscriber closed the products channel")
    finally:
        manager.disconnect(websocket)
