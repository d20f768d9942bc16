# tripmate/api/services/post_service.py
"""Service layer for trip listings, participation and comments."""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update

from tripmate.api.database import db
from tripmate.api.errors import NotFoundError, PermissionDenied, ValidationError
from tripmate.api.models import OPEN_STATUSES, Comment, Post, User
from tripmate.api.schemas import CommentPayload, PostCreatePayload, PostQuery, PostUpdatePayload

logger = logging.getLogger(__name__)


class PostService:
    """Handles trip CRUD and the join/leave capacity rules."""

    @staticmethod
    def complete_past_trips(today: Optional[date] = None) -> int:
        """Mark every open trip whose travel date has passed as completed.

        Listings filter on the stored status column.

        Returns:
            Number of trips that changed state
        """
        today = today or date.today()
        result = db.session.execute(
            update(Post)
            .where(Post.status.in_(OPEN_STATUSES), Post.travel_date < today)
            .values(status="completed")
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            db.session.commit()
            logger.info(f"Marked {result.rowcount} past trip(s) as completed")
        return result.rowcount or 0

    @staticmethod
    def list_posts(query: PostQuery, page_size: int, max_page_size: int) -> Dict[str, Any]:
        """Filter and paginate trips.

        Args:
            query: Parsed filters and page settings
            page_size: Default page size
            max_page_size: Upper bound for a requested limit

        Returns:
            Dictionary with ``posts``, ``currentPage``, ``totalPages``, ``total``
        """
        PostService.complete_past_trips()

        stmt = select(Post)

        if query.from_city:
            stmt = stmt.where(Post.from_city.icontains(query.from_city, autoescape=True))
        if query.to_city:
            stmt = stmt.where(Post.to_city.icontains(query.to_city, autoescape=True))
        if query.travel_date:
            stmt = stmt.where(Post.travel_date == query.travel_date)

        if query.status:
            stmt = stmt.where(Post.status == query.status)
        else:
            stmt = stmt.where(Post.status.in_(OPEN_STATUSES), Post.travel_date >= date.today())

        stmt = stmt.order_by(Post.created_at.desc(), Post.id)

        per_page = min(query.limit or page_size, max_page_size)
        page = db.paginate(stmt, page=query.page, per_page=per_page, error_out=False)

        return {
            "posts": [post.to_dict(include_comments=False) for post in page.items],
            "currentPage": query.page,
            "totalPages": max(page.pages, 1),
            "total": page.total,
        }

    @staticmethod
    def create_post(creator: User, payload: PostCreatePayload) -> Post:
        post = Post(
            title=payload.title,
            description=payload.description,
            from_city=payload.from_city,
            to_city=payload.to_city,
            travel_date=payload.travel_date,
            travel_time=payload.travel_time,
            max_participants=payload.max_participants,
            transport_mode=payload.transport_mode,
            estimated_cost=payload.estimated_cost,
            notes=payload.notes,
            creator=creator,
        )
        post.participants.append(creator)
        post.sync_status()
        db.session.add(post)
        db.session.commit()
        logger.info(f"Created trip {post.id} {post.from_city} -> {post.to_city} by {creator.id}")
        return post

    @staticmethod
    def get_post(post_id: str, lock: bool = False) -> Post:
        """Fetch a trip and bring its status up to date.

        Args:
            post_id: Trip id
            lock: Load the row with SELECT ... FOR UPDATE

        Raises:
            NotFoundError: If the trip does not exist
        """
        if lock:
            stmt = select(Post).where(Post.id == post_id).with_for_update()
            post = db.session.execute(stmt.execution_options(populate_existing=True)).scalar_one_or_none()
        else:
            post = db.session.get(Post, post_id)
        if post is None:
            raise NotFoundError("Trip not found")
        if post.sync_status() and not lock:
            db.session.commit()
        return post

    @staticmethod
    def _require_creator(post: Post, user: User, action: str) -> None:
        if post.creator_id != user.id:
            logger.warning(f"User {user.id} tried to {action} trip {post.id} they do not own")
            raise PermissionDenied(f"Only the trip creator can {action} this trip")

    @staticmethod
    def update_post(post_id: str, user: User, payload: PostUpdatePayload) -> Post:
        post = PostService.get_post(post_id)
        PostService._require_creator(post, user, "update")

        if post.status in ("cancelled", "completed"):
            raise ValidationError(f"Cannot update a {post.status} trip")

        changes = payload.model_dump(exclude_unset=True)
        new_max = changes.get("max_participants")
        if new_max is not None and new_max < post.current_participants:
            raise ValidationError(
                "Max participants cannot be lower than the current participant count",
                details={"maxParticipants": f"At least {post.current_participants} required"},
            )

        for field, value in changes.items():
            if value is None and field not in ("estimated_cost", "notes"):
                continue
            setattr(post, field, value)

        post.sync_status()
        db.session.commit()
        logger.info(f"Updated trip {post.id}: {sorted(changes)}")
        return post

    @staticmethod
    def cancel_post(post_id: str, user: User) -> Post:
        post = PostService.get_post(post_id)
        PostService._require_creator(post, user, "cancel")
        post.status = "cancelled"
        db.session.commit()
        logger.info(f"Cancelled trip {post.id}")
        return post

    @staticmethod
    def join_post(post_id: str, user: User) -> Post:
        """Add the user to the trip's participants.

        Raises:
            ValidationError: Own trip, already joined, or trip not open
        """
        post = PostService.get_post(post_id, lock=True)

        if post.creator_id == user.id:
            raise ValidationError("You cannot join your own trip")
        if post.has_participant(user.id):
            raise ValidationError("You have already joined this trip")
        if post.status != "active":
            raise ValidationError(f"This trip is {post.status} and cannot be joined")

        post.participants.append(user)
        post.sync_status()
        db.session.commit()
        logger.info(f"User {user.id} joined trip {post.id} ({post.current_participants}/{post.max_participants})")
        return post

    @staticmethod
    def leave_post(post_id: str, user: User) -> Post:
        post = PostService.get_post(post_id)

        if post.creator_id == user.id:
            raise ValidationError("Trip creators cannot leave their own trip; cancel it instead")
        if not post.has_participant(user.id):
            raise ValidationError("You are not a participant of this trip")

        post.participants.remove(user)
        post.sync_status()
        db.session.commit()
        logger.info(f"User {user.id} left trip {post.id}")
        return post

    @staticmethod
    def add_comment(post_id: str, user: User, payload: CommentPayload) -> List[Comment]:
        post = PostService.get_post(post_id)
        comment = Comment(post=post, user=user, text=payload.text)
        db.session.add(comment)
        db.session.commit()
        logger.debug(f"User {user.id} commented on trip {post.id}")
        return list(post.comments)
