# api/config.py
"""Configuration management for the tripmate API."""
import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

VALID_ASYNC_MODES = ("threading", "eventlet", "gevent", "gevent_uwsgi")


def get_database_url():
    """Get the SQLAlchemy database URL from environment."""
    return os.getenv("DATABASE_URL", "sqlite:///tripmate.db")


def get_secret_key():
    """Get the Flask secret key, generating a temporary one if unset."""
    secret = os.getenv("FLASK_SECRET_KEY")
    if not secret:
        logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
        secret = os.urandom(32).hex()
    return secret


def get_cors_origins():
    """Get allowed CORS origins."""
    origins = os.getenv("CORS_ORIGINS", "*")
    if origins == "*":
        return "*"
    return [o.strip() for o in origins.split(",") if o.strip()]


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def get_log_level():
    """Get log level name."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_pagination_config():
    """Get trip listing page sizes."""
    return {
        "page_size": int(os.getenv("POSTS_PAGE_SIZE", "10")),
        "max_page_size": int(os.getenv("POSTS_MAX_PAGE_SIZE", "50")),
    }


def get_websocket_config():
    """Get WebSocket configuration."""
    return {
        "async_mode": os.getenv("SOCKETIO_ASYNC_MODE", "threading"),
        "ping_interval": int(os.getenv("WEBSOCKET_PING_INTERVAL", "25")),
        "ping_timeout": int(os.getenv("WEBSOCKET_PING_TIMEOUT", "60")),
        "cors_allowed_origins": get_cors_origins(),
        "max_message_length": int(os.getenv("CHAT_MAX_MESSAGE_LENGTH", "1000")),
    }


def get_app_config(secret_key=None):
    """Flask config mapping assembled from the environment.

    Args:
        secret_key: Key supplied by the caller; skips the environment lookup
    """
    return {
        "SECRET_KEY": secret_key or get_secret_key(),
        "SQLALCHEMY_DATABASE_URI": get_database_url(),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "SESSION_COOKIE_SECURE": os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true",
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "PERMANENT_SESSION_LIFETIME": int(os.getenv("SESSION_LIFETIME_SECONDS", "86400")),
        "POSTS_PAGE_SIZE": get_pagination_config()["page_size"],
        "POSTS_MAX_PAGE_SIZE": get_pagination_config()["max_page_size"],
        "CORS_ORIGINS": get_cors_origins(),
        "LOG_LEVEL": get_log_level(),
        "WEBSOCKET": get_websocket_config(),
    }


def validate_config(config):
    """Validate an assembled app config mapping.

    Raises:
        ValueError: If a setting is out of range
    """
    if config["POSTS_PAGE_SIZE"] < 1 or config["POSTS_MAX_PAGE_SIZE"] < 1:
        raise ValueError("Page sizes must be positive")

    if config["POSTS_PAGE_SIZE"] > config["POSTS_MAX_PAGE_SIZE"]:
        raise ValueError("POSTS_PAGE_SIZE cannot exceed POSTS_MAX_PAGE_SIZE")

    ws = config["WEBSOCKET"]
    if ws["async_mode"] not in VALID_ASYNC_MODES:
        raise ValueError(f"Invalid async mode. Must be one of: {', '.join(VALID_ASYNC_MODES)}")

    if ws["max_message_length"] < 1:
        raise ValueError("CHAT_MAX_MESSAGE_LENGTH must be positive")

    return True
