# tripmate/routes/__init__.py
from .auth import create_auth_blueprint
from .chat import create_chat_blueprint
from .posts import create_posts_blueprint
from .users import create_users_blueprint
from .websocket import NAMESPACE, register_websocket_handlers

__all__ = [
    'create_auth_blueprint',
    'create_chat_blueprint',
    'create_posts_blueprint',
    'create_users_blueprint',
    'register_websocket_handlers',
    'NAMESPACE',
]
