# tripmate/api/services/user_service.py
"""Service layer for accounts and profiles."""

import logging
from typing import Any, Dict

from sqlalchemy import select

from tripmate.api.auth import hash_password, verify_password
from tripmate.api.database import db
from tripmate.api.errors import AuthenticationError, ConflictError, NotFoundError
from tripmate.api.models import User
from tripmate.api.schemas import LoginPayload, ProfileUpdatePayload, RegisterPayload
from tripmate.api.services.post_service import PostService

logger = logging.getLogger(__name__)

# columns that may be cleared by sending an empty value
CLEARABLE_PROFILE_FIELDS = ("phone", "bio")


class UserService:
    """Handles registration, login checks and profile reads/writes."""

    @staticmethod
    def register(payload: RegisterPayload) -> User:
        """Create a new account.

        Raises:
            ConflictError: If the email is already registered
        """
        if UserService.find_by_email(payload.email) is not None:
            raise ConflictError("User already exists with this email")

        user = User(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
            city=payload.city,
            age=payload.age,
            phone=payload.phone,
            bio=payload.bio,
        )
        db.session.add(user)
        db.session.commit()
        logger.info(f"Registered user {user.id}")
        return user

    @staticmethod
    def authenticate(payload: LoginPayload) -> User:
        """Return the user for valid credentials.

        Raises:
            AuthenticationError: On unknown email or wrong password
        """
        user = UserService.find_by_email(payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            logger.info("Rejected login attempt")
            raise AuthenticationError("Invalid email or password")
        return user

    @staticmethod
    def find_by_email(email: str):
        return db.session.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()

    @staticmethod
    def get_user(user_id: str) -> User:
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def update_profile(user: User, payload: ProfileUpdatePayload) -> User:
        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if field in CLEARABLE_PROFILE_FIELDS:
                setattr(user, field, value or None)
            elif value is not None:
                setattr(user, field, value)
        db.session.commit()
        logger.debug(f"Updated profile for {user.id}: {sorted(changes)}")
        return user

    @staticmethod
    def split_trips(user: User) -> Dict[str, Any]:
        """Trips the user created and trips they joined as a guest."""
        PostService.complete_past_trips()
        created = list(user.trips_created)
        joined = [post for post in user.trips_joined if post.creator_id != user.id]
        return {
            "tripsCreated": [post.to_dict(include_comments=False) for post in created],
            "tripsJoined": [post.to_dict(include_comments=False) for post in joined],
        }

    @staticmethod
    def get_profile(user: User, private: bool = False) -> Dict[str, Any]:
        profile = user.to_dict(private=private)
        profile.update(UserService.split_trips(user))
        return profile
