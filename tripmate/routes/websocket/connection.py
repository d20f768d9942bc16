# tripmate/routes/websocket/connection.py
"""WebSocket connection lifecycle and presence handlers."""

import time
import logging
from flask import request
from flask_socketio import join_room

from .base import BaseWebSocketHandler, user_room

logger = logging.getLogger(__name__)


class ConnectionHandler(BaseWebSocketHandler):
    """Handles connect/join/disconnect and presence queries."""

    def register_handlers(self):
        """Register connection-related event handlers."""

        @self.socketio.on('connect', namespace=self.namespace)
        def handle_connect(auth=None):
            """Accept only sockets that carry a logged-in session."""
            user_id = self.current_user_id()
            if user_id is None:
                logger.info(f"🚫 Refused unauthenticated socket {request.sid}")
                return False

            self.log_event('connect')
            self.emit_to_client('connected', {'sid': request.sid, 'userId': user_id})
            return None

        @self.socketio.on('join', namespace=self.namespace)
        def handle_join(user_id=None):
            """Client announces its identity right after connecting."""
            try:
                if isinstance(user_id, dict):
                    user_id = user_id.get('userId')
                authenticated_id = self.current_user_id()
                if authenticated_id is None:
                    self.emit_to_client('error', {'message': 'Not authenticated', 'event': 'join'})
                    return
                if user_id is not None and str(user_id) != authenticated_id:
                    logger.warning(f"⚠️ Socket {request.sid} tried to join as {user_id} while logged in as {authenticated_id}")
                    self.emit_to_client('error', {'message': 'Cannot join as another user', 'event': 'join'})
                    return

                join_room(user_room(authenticated_id))
                came_online = self.presence.register(authenticated_id, request.sid)
                self.log_event('join')

                if came_online:
                    self.socketio.emit(
                        'userOnline',
                        {'userId': authenticated_id},
                        namespace=self.namespace,
                        skip_sid=request.sid,
                    )

                self.emit_to_client('joined', {
                    'userId': authenticated_id,
                    'onlineUsers': self.presence.online_users(),
                })
            except Exception as exc:
                self.handle_error(exc, 'join')

        @self.socketio.on('disconnect', namespace=self.namespace)
        def handle_disconnect(reason=None):
            """Drop the socket from presence; broadcast when the user's last socket goes."""
            sid = request.sid
            user_id = self.presence.user_for_sid(sid)
            went_offline = self.presence.unregister(sid)
            logger.info(f"🔌 Socket {sid} disconnected (user {user_id}, reason {reason})")

            if went_offline:
                self.socketio.emit(
                    'userOffline',
                    {'userId': went_offline},
                    namespace=self.namespace,
                    skip_sid=sid,
                )

        @self.socketio.on('getOnlineUsers', namespace=self.namespace)
        def handle_get_online_users(data=None):
            self.emit_to_client('onlineUsers', {'users': self.presence.online_users()})

        @self.socketio.on('ping', namespace=self.namespace)
        def handle_ping(data=None):
            """Handle ping for connection testing."""
            self.emit_to_client('pong', {'timestamp': time.time()})
