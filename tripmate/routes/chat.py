# tripmate/routes/chat.py
"""REST conversation and message store used by the chat screen."""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from tripmate.api.schemas import MessagePayload
from tripmate.api.services import ChatService


def create_chat_blueprint():
    """Create the ``/api/chat`` blueprint.

    ``/conversations`` and ``/unread-count`` are static rules, so Werkzeug
    matches them before the ``/<user_id>`` rule.
    """
    chat_bp = Blueprint("chat", __name__, url_prefix="/api/chat")

    @chat_bp.before_request
    @login_required
    def require_login():
        return None

    @chat_bp.route("/conversations")
    def list_conversations():
        return jsonify(ChatService.list_conversations(current_user))

    @chat_bp.route("/unread-count")
    def unread_count():
        return jsonify({"unreadCount": ChatService.unread_count(current_user)})

    @chat_bp.route("/<user_id>")
    def open_conversation(user_id):
        """Get or create the thread with ``user_id``, optionally tied to a trip."""
        conversation = ChatService.open_conversation(
            current_user, user_id, post_id=request.args.get("postId") or None
        )
        return jsonify(conversation.to_dict())

    @chat_bp.route("/<conversation_id>/messages", methods=["GET"])
    def list_messages(conversation_id):
        conversation = ChatService.get_conversation_for(current_user, conversation_id)
        return jsonify([m.to_dict() for m in conversation.messages])

    @chat_bp.route("/<conversation_id>/messages", methods=["POST"])
    def send_message(conversation_id):
        payload = MessagePayload.model_validate(request.get_json(silent=True) or {})
        message = ChatService.send_message(current_user, conversation_id, payload)
        return jsonify({
            "message": "Message sent",
            "sentMessage": message.to_dict(),
            "conversation": message.conversation.to_dict(include_messages=False),
        }), 201

    @chat_bp.route("/<conversation_id>/read", methods=["PUT"])
    def mark_read(conversation_id):
        updated = ChatService.mark_read(current_user, conversation_id)
        return jsonify({"message": "Messages marked as read", "updated": updated})

    return chat_bp
