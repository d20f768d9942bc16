"""Session authentication via Flask-Login and password hashing helpers."""

import logging

from flask import jsonify
from flask_login import LoginManager
from werkzeug.security import check_password_hash, generate_password_hash

from tripmate.api.database import db

logger = logging.getLogger(__name__)

login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    from tripmate.api.models import User

    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"message": "Authentication required"}), 401


def hash_password(password: str) -> str:
    """Hash a password with werkzeug's default KDF."""
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a stored hash."""
    return check_password_hash(password_hash, password)
