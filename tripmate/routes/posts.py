# tripmate/routes/posts.py
"""Trip listing routes."""

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from tripmate.api.schemas import CommentPayload, PostCreatePayload, PostQuery, PostUpdatePayload
from tripmate.api.services import PostService

logger = logging.getLogger(__name__)


def create_posts_blueprint():
    """Create and configure the posts blueprint.

    Returns:
        Blueprint mounted at ``/api/posts``
    """
    posts_bp = Blueprint("posts", __name__, url_prefix="/api/posts")

    @posts_bp.route("", methods=["GET"])
    def list_posts():
        """Browse and search trips."""
        query = PostQuery.model_validate(request.args.to_dict())
        result = PostService.list_posts(
            query,
            page_size=current_app.config["POSTS_PAGE_SIZE"],
            max_page_size=current_app.config["POSTS_MAX_PAGE_SIZE"],
        )
        return jsonify(result)

    @posts_bp.route("", methods=["POST"])
    @login_required
    def create_post():
        payload = PostCreatePayload.model_validate(request.get_json(silent=True) or {})
        post = PostService.create_post(current_user, payload)
        return jsonify({"message": "Trip created successfully", "post": post.to_dict()}), 201

    @posts_bp.route("/<post_id>", methods=["GET"])
    def get_post(post_id):
        return jsonify(PostService.get_post(post_id).to_dict())

    @posts_bp.route("/<post_id>", methods=["PUT"])
    @login_required
    def update_post(post_id):
        payload = PostUpdatePayload.model_validate(request.get_json(silent=True) or {})
        post = PostService.update_post(post_id, current_user, payload)
        return jsonify({"message": "Trip updated successfully", "post": post.to_dict()})

    @posts_bp.route("/<post_id>", methods=["DELETE"])
    @login_required
    def cancel_post(post_id):
        """Cancel rather than delete; the row stays for participants' history."""
        PostService.cancel_post(post_id, current_user)
        return jsonify({"message": "Trip cancelled"})

    @posts_bp.route("/<post_id>/join", methods=["POST"])
    @login_required
    def join_post(post_id):
        post = PostService.join_post(post_id, current_user)
        return jsonify({"message": "Successfully joined the trip", "post": post.to_dict()})

    @posts_bp.route("/<post_id>/leave", methods=["POST"])
    @login_required
    def leave_post(post_id):
        post = PostService.leave_post(post_id, current_user)
        return jsonify({"message": "Successfully left the trip", "post": post.to_dict()})

    @posts_bp.route("/<post_id>/comments", methods=["POST"])
    @login_required
    def add_comment(post_id):
        payload = CommentPayload.model_validate(request.get_json(silent=True) or {})
        comments = PostService.add_comment(post_id, current_user, payload)
        return jsonify({
            "message": "Comment added successfully",
            "comments": [c.to_dict() for c in comments],
        }), 201

    return posts_bp
