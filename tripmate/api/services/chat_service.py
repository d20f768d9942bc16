# tripmate/api/services/chat_service.py
"""Service layer for two-party conversations and their messages."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased, selectinload

from tripmate.api.database import db, isoformat, utcnow
from tripmate.api.errors import NotFoundError, PermissionDenied, ValidationError
from tripmate.api.models import Conversation, Message, Post, User
from tripmate.api.schemas import MessagePayload

logger = logging.getLogger(__name__)


class ChatService:
    """Conversation store consumed by the chat screen and the socket relay."""

    @staticmethod
    def find_conversation_between(first_id: str, second_id: str) -> Optional[Conversation]:
        user_a_id, user_b_id = Conversation.ordered_pair(first_id, second_id)
        stmt = select(Conversation).where(
            Conversation.user_a_id == user_a_id,
            Conversation.user_b_id == user_b_id,
        )
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def open_conversation(user: User, other_user_id: str, post_id: Optional[str] = None) -> Conversation:
        """Get or create the conversation between ``user`` and another user.

        Args:
            user: The caller
            other_user_id: The user to chat with
            post_id: Optional trip the chat was opened from

        Returns:
            The conversation, with ``related_post`` updated when a trip is given

        Raises:
            ValidationError: If the caller tries to chat with themselves
            NotFoundError: If the other user or the trip is unknown
        """
        if other_user_id == user.id:
            raise ValidationError("You cannot start a conversation with yourself")

        other = db.session.get(User, other_user_id)
        if other is None:
            raise NotFoundError("User not found")

        post = None
        if post_id:
            post = db.session.get(Post, post_id)
            if post is None:
                raise NotFoundError("Trip not found")

        conversation = ChatService.find_conversation_between(user.id, other.id)
        if conversation is None:
            user_a_id, user_b_id = Conversation.ordered_pair(user.id, other.id)
            conversation = Conversation(user_a_id=user_a_id, user_b_id=user_b_id, related_post=post)
            db.session.add(conversation)
            try:
                db.session.commit()
                logger.info(f"Created conversation {conversation.id} between {user.id} and {other.id}")
            except IntegrityError:
                # the other side opened it concurrently
                db.session.rollback()
                conversation = ChatService.find_conversation_between(user.id, other.id)
                if conversation is None:
                    raise
        if post is not None and conversation.related_post_id != post.id:
            conversation.related_post = post
            db.session.commit()

        return conversation

    @staticmethod
    def get_conversation_for(user: User, conversation_id: str) -> Conversation:
        """Fetch a conversation the user takes part in.

        Raises:
            NotFoundError: Unknown conversation
            PermissionDenied: The user is not one of the two participants
        """
        conversation = db.session.get(Conversation, conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        if not conversation.has_participant(user.id):
            logger.warning(f"User {user.id} denied access to conversation {conversation_id}")
            raise PermissionDenied("You are not a participant of this conversation")
        return conversation

    @staticmethod
    def send_message(user: User, conversation_id: str, payload: MessagePayload) -> Message:
        conversation = ChatService.get_conversation_for(user, conversation_id)
        message = Message(conversation=conversation, sender=user, content=payload.content)
        conversation.updated_at = utcnow()
        db.session.add(message)
        db.session.commit()
        logger.debug(f"Stored message {message.id} in conversation {conversation.id}")
        return message

    @staticmethod
    def mark_read(user: User, conversation_id: str) -> int:
        """Mark every unread message addressed to ``user`` as read.

        Returns:
            Number of messages that changed state
        """
        conversation = ChatService.get_conversation_for(user, conversation_id)
        result = db.session.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation.id,
                Message.sender_id != user.id,
                Message.read_at.is_(None),
            )
            .values(read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount or 0

    @staticmethod
    def _unread_by_conversation(user: User, conversation_ids: List[str]) -> Dict[str, int]:
        if not conversation_ids:
            return {}
        stmt = (
            select(Message.conversation_id, func.count(Message.id))
            .where(
                Message.conversation_id.in_(conversation_ids),
                Message.sender_id != user.id,
                Message.read_at.is_(None),
            )
            .group_by(Message.conversation_id)
        )
        return {conversation_id: count for conversation_id, count in db.session.execute(stmt)}

    @staticmethod
    def _last_messages(conversation_ids: List[str]) -> Dict[str, Message]:
        """Newest message of each conversation, fetched in one query."""
        if not conversation_ids:
            return {}
        ranked = (
            select(
                Message,
                func.row_number()
                .over(
                    partition_by=Message.conversation_id,
                    order_by=(Message.created_at.desc(), Message.id.desc()),
                )
                .label("position"),
            )
            .where(Message.conversation_id.in_(conversation_ids))
            .subquery()
        )
        latest = aliased(Message, ranked)
        stmt = select(latest).where(ranked.c.position == 1)
        return {message.conversation_id: message for message in db.session.execute(stmt).scalars()}

    @staticmethod
    def list_conversations(user: User) -> List[Dict[str, Any]]:
        """The user's conversations, most recently active first."""
        stmt = (
            select(Conversation)
            .where(or_(Conversation.user_a_id == user.id, Conversation.user_b_id == user.id))
            .options(
                selectinload(Conversation.user_a),
                selectinload(Conversation.user_b),
                selectinload(Conversation.related_post),
            )
            .order_by(Conversation.updated_at.desc(), Conversation.id)
        )
        conversations = db.session.execute(stmt).scalars().all()
        conversation_ids = [c.id for c in conversations]
        unread = ChatService._unread_by_conversation(user, conversation_ids)
        latest = ChatService._last_messages(conversation_ids)

        summaries = []
        for conversation in conversations:
            last = latest.get(conversation.id)
            summaries.append({
                "_id": conversation.id,
                "participant": conversation.other_participant(user.id).to_ref(),
                "lastMessage": {
                    "content": last.content,
                    "timestamp": isoformat(last.created_at),
                    "sender": last.sender_id,
                } if last else None,
                "unreadCount": unread.get(conversation.id, 0),
                "relatedPost": conversation.related_post_ref(),
                "updatedAt": isoformat(conversation.updated_at),
            })
        return summaries

    @staticmethod
    def unread_count(user: User) -> int:
        stmt = (
            select(func.count(Message.id))
            .join(Conversation, Message.conversation_id == Conversation.id)
            .where(
                or_(Conversation.user_a_id == user.id, Conversation.user_b_id == user.id),
                Message.sender_id != user.id,
                Message.read_at.is_(None),
            )
        )
        return db.session.execute(stmt).scalar_one()
