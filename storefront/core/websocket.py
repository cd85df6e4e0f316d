"""WebSocket connection manager"""

from typing import Any, List
from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

def build_message(event: str, data: Any = None) -> dict:
    """Outbound envelope shared by every real-time message"""
    return {
        "type": event,
        "data": jsonable_encoder(data),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

class ConnectionManager:
    """Manages WebSocket connections"""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        """Accept new connection"""
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"Subscriber connected ({len(self.active_connections)} active)")

    def disconnect(self, websocket: WebSocket):
        """Remove connection"""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(f"Subscriber disconnected ({len(self.active_connections)} active)")

    async def send_personal_message(self, websocket: WebSocket, event: str, data: Any = None) -> bool:
        """Send message to one subscriber; drops it when the send fails"""
        try:
            await websocket.send_json(build_message(event, data))
            return True
        except Exception as e:
            logger.warning(f"Dropping subscriber after failed send of {event}: {e}")
            self.disconnect(websocket)
            return False

    async def broadcast(self, event: str, data: Any = None) -> int:
        """Send message to every connected subscriber, best effort"""
        message = build_message(event, data)
        delivered = 0
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping subscriber after failed broadcast of {event}: {e}")
                self.disconnect(connection)
        return delivered

    def __len__(self) -> int:
        return len(self.active_connections)

# Global connection manager
manager = ConnectionManager()
