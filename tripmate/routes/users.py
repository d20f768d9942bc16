# tripmate/routes/users.py
"""Public profiles and the caller's own trips."""

from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from tripmate.api.services import UserService


def create_users_blueprint():
    users_bp = Blueprint("users", __name__, url_prefix="/api/users")

    @users_bp.route("/profile/<user_id>")
    def profile(user_id):
        """Public profile with created and joined trips."""
        user = UserService.get_user(user_id)
        return jsonify(UserService.get_profile(user))

    @users_bp.route("/my-trips")
    @login_required
    def my_trips():
        return jsonify(UserService.split_trips(current_user))

    return users_bp
