# tripmate/routes/websocket/base.py
"""Base WebSocket handler with common functionality."""

import logging
from flask import request
from flask_login import current_user
from flask_socketio import emit

logger = logging.getLogger(__name__)

# the client connects to the default namespace
NAMESPACE = "/"


def user_room(user_id):
    """Room every socket of a user joins."""
    return f"user:{user_id}"


class BaseWebSocketHandler:
    """Base class for WebSocket handlers with common functionality."""

    def __init__(self, socketio, presence, namespace=NAMESPACE):
        self.socketio = socketio
        self.presence = presence
        self.namespace = namespace

    def emit_to_client(self, event, data, room=None):
        """Emit event to the calling client or to a room."""
        try:
            if room:
                self.socketio.emit(event, data, to=room, namespace=self.namespace)
            else:
                emit(event, data, namespace=self.namespace)
        except Exception as e:
            logger.error(f"Failed to emit {event}: {e}")

    def current_user_id(self):
        """Authenticated user id for this socket, or None."""
        if current_user.is_authenticated:
            return current_user.id
        return None

    def get_client_info(self):
        """Get information about the connected client."""
        return {
            "sid": request.sid,
            "ip": request.remote_addr,
            "origin": request.headers.get('Origin', 'unknown'),
            "user_id": self.current_user_id(),
        }

    def log_event(self, event_name, data=None):
        """Log WebSocket events consistently."""
        client_info = self.get_client_info()
        if data:
            logger.info(f"[WS] {event_name} - Client: {client_info['sid']}, User: {client_info['user_id']}, Data: {data}")
        else:
            logger.info(f"[WS] {event_name} - Client: {client_info['sid']}, User: {client_info['user_id']}")

    def handle_error(self, error, event_name=""):
        """Handle and log errors consistently."""
        client_info = self.get_client_info()
        logger.error(f"[WS] Error in {event_name} - Client: {client_info['sid']}, Error: {error}")
        self.emit_to_client('error', {'message': str(error), 'event': event_name})
