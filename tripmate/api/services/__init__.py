"""Service layer."""

from .chat_service import ChatService
from .post_service import PostService
from .user_service import UserService

__all__ = ['ChatService', 'PostService', 'UserService']
