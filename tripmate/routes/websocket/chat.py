# tripmate/routes/websocket/chat.py
"""WebSocket relay for live chat messages."""

import logging
from datetime import datetime, timezone

from flask import current_app, request
from pydantic import ValidationError as PydanticValidationError

from tripmate.api.database import db
from tripmate.api.errors import APIError, format_validation_errors
from tripmate.api.models import Conversation, User
from tripmate.api.schemas import SocketMessagePayload
from tripmate.api.services import ChatService

from .base import BaseWebSocketHandler, user_room

logger = logging.getLogger(__name__)


class ChatRelayError(APIError):
    status_code = 400


class ChatHandler(BaseWebSocketHandler):
    """Relays ``sendMessage`` to the receiver's sockets as ``receiveMessage``.

    The message itself is persisted by the REST store; this channel only
    carries the live copy to whoever is looking at the conversation.
    """

    def _resolve_conversation_id(self, sender_id, receiver_id, conversation_id):
        if conversation_id:
            conversation = db.session.get(Conversation, conversation_id)
            if conversation is None or not (
                conversation.has_participant(sender_id) and conversation.has_participant(receiver_id)
            ):
                raise ChatRelayError("Conversation does not belong to these users")
            return conversation.id
        conversation = ChatService.find_conversation_between(sender_id, receiver_id)
        return conversation.id if conversation else None

    def relay_message(self, data):
        """Validate and forward one message.

        Returns:
            Ack payload for the sender
        """
        sender_id = self.presence.user_for_sid(request.sid)
        if sender_id is None:
            raise ChatRelayError("Join before sending messages")
        if sender_id != self.current_user_id():
            raise ChatRelayError("Socket identity does not match the session")

        payload = SocketMessagePayload.model_validate(data if isinstance(data, dict) else {})
        if payload.sender_id is not None and str(payload.sender_id) != sender_id:
            raise ChatRelayError("senderId does not match the authenticated user")
        if payload.receiver_id == sender_id:
            raise ChatRelayError("Cannot send a message to yourself")
        if db.session.get(User, payload.receiver_id) is None:
            raise ChatRelayError("Receiver not found")

        max_length = current_app.config["WEBSOCKET"]["max_message_length"]
        if max_length and len(payload.message) > max_length:
            raise ChatRelayError(f"Message exceeds {max_length} characters")

        conversation_id = self._resolve_conversation_id(sender_id, payload.receiver_id, payload.conversation_id)
        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

        self.socketio.emit(
            'receiveMessage',
            {
                'senderId': sender_id,
                'receiverId': payload.receiver_id,
                'message': payload.message,
                'conversationId': conversation_id,
                'timestamp': timestamp,
            },
            to=user_room(payload.receiver_id),
            namespace=self.namespace,
        )
        self.presence.record_relay()

        delivered = self.presence.is_online(payload.receiver_id)
        logger.debug(f"💬 Relayed message {sender_id} -> {payload.receiver_id} (delivered={delivered})")
        return {'status': 'ok', 'delivered': delivered, 'conversationId': conversation_id, 'timestamp': timestamp}

    def register_handlers(self):
        """Register chat event handlers."""

        @self.socketio.on('sendMessage', namespace=self.namespace)
        def handle_send_message(data=None):
            try:
                return self.relay_message(data)
            except PydanticValidationError as exc:
                details = format_validation_errors(exc)
                self.emit_to_client('error', {'message': 'Invalid message', 'event': 'sendMessage', 'details': details})
                return {'status': 'error', 'message': 'Invalid message', 'details': details}
            except APIError as exc:
                logger.info(f"[WS] sendMessage rejected for {request.sid}: {exc.message}")
                self.emit_to_client('error', {'message': exc.message, 'event': 'sendMessage'})
                return {'status': 'error', 'message': exc.message}
            except Exception as exc:
                self.handle_error(exc, 'sendMessage')
                return {'status': 'error', 'message': 'Failed to send message'}
