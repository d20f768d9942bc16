"""SQLAlchemy models for users, trips, comments and chat.

JSON shapes mirror what the single-page client reads: primary keys are
exposed as ``_id`` and field names are camelCase.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from flask_login import UserMixin

from tripmate.api.database import db, generate_uuid, isoformat, utcnow

TRANSPORT_MODES = ("car", "bus", "train", "flight", "other")
POST_STATUSES = ("active", "full", "completed", "cancelled")
OPEN_STATUSES = ("active", "full")


post_participants = db.Table(
    "post_participants",
    db.Column("post_id", db.String(36), db.ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    db.Column("joined_at", db.DateTime, nullable=False, default=utcnow),
)


class User(UserMixin, db.Model):
    """A registered traveller."""

    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    bio = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    trips_created = db.relationship(
        "Post", back_populates="creator", order_by="Post.travel_date.desc()"
    )
    trips_joined = db.relationship(
        "Post",
        secondary=post_participants,
        back_populates="participants",
        order_by="Post.travel_date.desc()",
    )

    def to_ref(self) -> dict:
        """Compact form embedded in trips, comments and conversations."""
        return {"_id": self.id, "name": self.name, "city": self.city}

    def to_dict(self, private: bool = False) -> dict:
        data = {
            "_id": self.id,
            "name": self.name,
            "city": self.city,
            "age": self.age,
            "bio": self.bio or "",
            "createdAt": isoformat(self.created_at),
        }
        if private:
            data.update({"id": self.id, "email": self.email, "phone": self.phone or ""})
        return data

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"


class Post(db.Model):
    """A trip listing other users can join."""

    __tablename__ = "posts"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(1000), nullable=False)
    from_city = db.Column(db.String(100), nullable=False, index=True)
    to_city = db.Column(db.String(100), nullable=False, index=True)
    travel_date = db.Column(db.Date, nullable=False, index=True)
    travel_time = db.Column(db.String(5), nullable=False)
    max_participants = db.Column(db.Integer, nullable=False, default=2)
    transport_mode = db.Column(db.String(20), nullable=False, default="car")
    estimated_cost = db.Column(db.Float, nullable=True)
    notes = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(20), nullable=False, default="active", index=True)
    creator_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    creator = db.relationship("User", back_populates="trips_created")
    participants = db.relationship(
        "User",
        secondary=post_participants,
        back_populates="trips_joined",
        order_by=post_participants.c.joined_at,
    )
    comments = db.relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )

    @property
    def current_participants(self) -> int:
        return len(self.participants)

    def has_participant(self, user_id: str) -> bool:
        return any(p.id == user_id for p in self.participants)

    def sync_status(self, today: Optional[date] = None) -> bool:
        """Recompute the derived status; return True when it changed.

        Cancelled is terminal. A trip whose date has passed is completed,
        otherwise it is full exactly when every seat is taken.
        """
        if self.status == "cancelled":
            return False
        today = today or date.today()
        if self.travel_date < today:
            new_status = "completed"
        elif self.current_participants >= self.max_participants:
            new_status = "full"
        else:
            new_status = "active"
        changed = new_status != self.status
        self.status = new_status
        return changed

    def to_dict(self, include_comments: bool = True) -> dict:
        data = {
            "_id": self.id,
            "title": self.title,
            "description": self.description,
            "fromCity": self.from_city,
            "toCity": self.to_city,
            "travelDate": self.travel_date.isoformat(),
            "travelTime": self.travel_time,
            "maxParticipants": self.max_participants,
            "currentParticipants": self.current_participants,
            "transportMode": self.transport_mode,
            "estimatedCost": self.estimated_cost,
            "notes": self.notes or "",
            "status": self.status,
            "creator": self.creator.to_ref(),
            "participants": [p.to_ref() for p in self.participants],
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_comments:
            data["comments"] = [c.to_dict() for c in self.comments]
        else:
            data["commentCount"] = len(self.comments)
        return data

    def __repr__(self) -> str:
        return f"<Post {self.id} {self.from_city}->{self.to_city} {self.status}>"


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    post_id = db.Column(db.String(36), db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    text = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    post = db.relationship("Post", back_populates="comments")
    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "text": self.text,
            "user": self.user.to_ref(),
            "createdAt": isoformat(self.created_at),
        }


class Conversation(db.Model):
    """A two-party message thread.

    The pair is stored in canonical order (``user_a_id < user_b_id``) so the
    unique constraint holds no matter which side opened the thread.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        db.UniqueConstraint("user_a_id", "user_b_id", name="uq_conversation_pair"),
        db.CheckConstraint("user_a_id < user_b_id", name="ck_conversation_pair_order"),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_a_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_b_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    related_post_id = db.Column(db.String(36), db.ForeignKey("posts.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    user_a = db.relationship("User", foreign_keys=[user_a_id])
    user_b = db.relationship("User", foreign_keys=[user_b_id])
    related_post = db.relationship("Post")
    messages = db.relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by=lambda: [Message.created_at, Message.id],
    )

    @staticmethod
    def ordered_pair(first_id: str, second_id: str) -> tuple[str, str]:
        return (first_id, second_id) if first_id < second_id else (second_id, first_id)

    @property
    def participants(self) -> list[User]:
        return [self.user_a, self.user_b]

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.user_a_id, self.user_b_id)

    def other_participant(self, user_id: str) -> User:
        return self.user_b if user_id == self.user_a_id else self.user_a

    def related_post_ref(self) -> Optional[dict]:
        if self.related_post is None:
            return None
        return {"_id": self.related_post.id, "title": self.related_post.title}

    def to_dict(self, include_messages: bool = True) -> dict:
        data = {
            "_id": self.id,
            "participants": [p.to_ref() for p in self.participants],
            "relatedPost": self.related_post_ref(),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_messages:
            data["messages"] = [m.to_dict() for m in self.messages]
        return data


class Message(db.Model):
    __tablename__ = "messages"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    conversation_id = db.Column(
        db.String(36), db.ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = db.Column(db.String(1000), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    read_at = db.Column(db.DateTime, nullable=True)

    conversation = db.relationship("Conversation", back_populates="messages")
    sender = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "conversationId": self.conversation_id,
            "sender": {"_id": self.sender.id, "name": self.sender.name},
            "content": self.content,
            "timestamp": isoformat(self.created_at),
            "read": self.read_at is not None,
        }
