# tripmate/routes/auth.py
"""Account routes: register, login, logout, current user."""

import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from tripmate.api.schemas import LoginPayload, ProfileUpdatePayload, RegisterPayload
from tripmate.api.services import UserService

logger = logging.getLogger(__name__)


def create_auth_blueprint():
    """Create the ``/api/auth`` blueprint."""
    auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

    @auth_bp.route("/register", methods=["POST"])
    def register():
        payload = RegisterPayload.model_validate(request.get_json(silent=True) or {})
        user = UserService.register(payload)
        login_user(user)
        return jsonify({
            "message": "Registration successful",
            "user": user.to_dict(private=True),
        }), 201

    @auth_bp.route("/login", methods=["POST"])
    def login():
        payload = LoginPayload.model_validate(request.get_json(silent=True) or {})
        user = UserService.authenticate(payload)
        login_user(user, remember=bool((request.get_json(silent=True) or {}).get("remember")))
        logger.info(f"User {user.id} logged in")
        return jsonify({"message": "Login successful", "user": user.to_dict(private=True)})

    @auth_bp.route("/logout", methods=["POST"])
    @login_required
    def logout():
        user_id = current_user.id
        logout_user()
        logger.info(f"User {user_id} logged out")
        return jsonify({"message": "Logged out"})

    @auth_bp.route("/me")
    @login_required
    def me():
        return jsonify(UserService.get_profile(current_user, private=True))

    @auth_bp.route("/profile", methods=["PUT"])
    @login_required
    def update_profile():
        payload = ProfileUpdatePayload.model_validate(request.get_json(silent=True) or {})
        user = UserService.update_profile(current_user, payload)
        return jsonify({"message": "Profile updated", "user": user.to_dict(private=True)})

    return auth_bp
