"""Real-time product notifications"""

from typing import Any, List
import logging

from storefront.core.websocket import ConnectionManager, manager
from storefront.repositories import Record

logger = logging.getLogger(__name__)

PRODUCTS_UPDATED = "productsUpdated"

class ProductBroadcaster:
    """Pushes product changes to every connected subscriber

    Used as the ProductService change hook: sends the refreshed listing
    first, then the change itself.
    """

    def __init__(self, connections: ConnectionManager = manager):
        self.connections = connections

    async def __call__(self, event: str, snapshot: List[Record], change: Any) -> None:
        if not len(self.connections):
            return
        await self.connections.broadcast(PRODUCTS_UPDATED, snapshot)
        delivered = await self.connections.broadcast(event, change)
        logger.debug(f"Broadcast {event} to {delivered} subscribers")
