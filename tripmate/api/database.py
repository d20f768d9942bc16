# tripmate/api/database.py
"""Database extension and small helpers shared by the models."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from flask_sqlalchemy import SQLAlchemy

# bare instance, bound to the app in create_app()
db = SQLAlchemy()


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo anyway)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Serialise a stored UTC timestamp for the client."""
    if value is None:
        return None
    return value.isoformat() + "Z"
