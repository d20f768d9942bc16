"""WebSocket route handlers initialization."""

import logging

from .base import NAMESPACE
from .chat import ChatHandler
from .connection import ConnectionHandler

logger = logging.getLogger(__name__)


def register_websocket_handlers(socketio, presence):
    """Register all WebSocket event handlers with SocketIO.

    Args:
        socketio: Flask-SocketIO instance
        presence: PresenceRegistry shared by the handlers
    """
    logger.info("Registering WebSocket handlers...")

    try:
        connection_handler = ConnectionHandler(socketio, presence, NAMESPACE)
        chat_handler = ChatHandler(socketio, presence, NAMESPACE)

        logger.info(f"Registering connection handler for namespace: {NAMESPACE}")
        connection_handler.register_handlers()

        logger.info(f"Registering chat handler for namespace: {NAMESPACE}")
        chat_handler.register_handlers()

        logger.info("✅ WebSocket handlers registered successfully")

    except Exception as e:
        logger.error(f"❌ Failed to register WebSocket handlers: {e}")
        logger.exception("WebSocket registration error:")
        raise


__all__ = ['register_websocket_handlers', 'NAMESPACE']
