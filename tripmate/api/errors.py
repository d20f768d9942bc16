"""API error types and JSON error handlers."""

import logging
from typing import Any, Optional

from flask import jsonify
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base error rendered as ``{"message": ..., "details": ...}``."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        payload = {"message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(APIError):
    status_code = 400


class AuthenticationError(APIError):
    status_code = 401


class PermissionDenied(APIError):
    status_code = 403


class NotFoundError(APIError):
    status_code = 404


class ConflictError(APIError):
    status_code = 409


def format_validation_errors(exc: PydanticValidationError) -> dict:
    """Flatten pydantic errors into ``{field: message}``."""
    details = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "body"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.setdefault(field, message)
    return details


def register_error_handlers(app):
    """Install JSON error handlers on the Flask app."""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error(f"API error: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(PydanticValidationError)
    def handle_validation_error(error):
        details = format_validation_errors(error)
        logger.info(f"Validation failed: {details}")
        return jsonify({"message": "Validation failed", "details": details}), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception(f"Unhandled error: {error}")
        return jsonify({"message": "Internal server error"}), 500
