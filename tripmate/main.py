"""
tripmate – main application entry point

* Flask app factory wiring the REST blueprints, Flask-SQLAlchemy,
  Flask-Login sessions and CORS.
* Flask-SocketIO carries the live chat channel on the default namespace;
  the socket shares the Flask-Login cookie session.
* Run locally with ``python -m tripmate.main``.
"""

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO

from tripmate.api.auth import login_manager
from tripmate.api.config import get_app_config, get_port, validate_config
from tripmate.api.database import db
from tripmate.api.errors import register_error_handlers
from tripmate.api.realtime import PresenceRegistry
from tripmate.routes import (
    NAMESPACE,
    create_auth_blueprint,
    create_chat_blueprint,
    create_posts_blueprint,
    create_users_blueprint,
    register_websocket_handlers,
)

logger = logging.getLogger(__name__)


def create_app(config_overrides=None):
    """Build the Flask app together with its Socket.IO server.

    Args:
        config_overrides: Optional mapping applied over the environment config

    Returns:
        Configured Flask app; the SocketIO instance is ``app.extensions["socketio"]``
    """
    # ----------------------------------------------------------------------- #
    # Configuration & logging
    # ----------------------------------------------------------------------- #
    config_overrides = config_overrides or {}
    config = get_app_config(secret_key=config_overrides.get("SECRET_KEY"))
    if config_overrides:
        websocket_overrides = config_overrides.get("WEBSOCKET", {})
        config.update({k: v for k, v in config_overrides.items() if k != "WEBSOCKET"})
        config["WEBSOCKET"] = {**config["WEBSOCKET"], **websocket_overrides}
    validate_config(config)

    logging.basicConfig(
        level=getattr(logging, config["LOG_LEVEL"], logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = Flask(__name__)
    app.config.update(config)

    # ----------------------------------------------------------------------- #
    # Extensions
    # ----------------------------------------------------------------------- #
    db.init_app(app)
    login_manager.init_app(app)
    CORS(app, origins=config["CORS_ORIGINS"], supports_credentials=True)

    ws_config = config["WEBSOCKET"]
    socketio = SocketIO(
        app,
        cors_allowed_origins=ws_config["cors_allowed_origins"],
        async_mode=ws_config["async_mode"],
        ping_interval=ws_config["ping_interval"],
        ping_timeout=ws_config["ping_timeout"],
        logger=False,
        engineio_logger=False,
    )
    logger.info(f"Socket.IO initialised (async_mode={socketio.async_mode})")

    presence = PresenceRegistry()
    app.extensions["presence"] = presence

    # ----------------------------------------------------------------------- #
    # Blueprints & WebSocket handlers
    # ----------------------------------------------------------------------- #
    app.register_blueprint(create_auth_blueprint())
    app.register_blueprint(create_users_blueprint())
    app.register_blueprint(create_posts_blueprint())
    app.register_blueprint(create_chat_blueprint())
    register_websocket_handlers(socketio, presence)
    register_error_handlers(app)

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "tripmate"})

    @app.route("/debug")
    def debug():
        """Socket and presence summary."""
        return jsonify({
            "status": "ok",
            "socketio_initialized": True,
            "websocket_namespace": NAMESPACE,
            "async_mode": socketio.async_mode,
            "presence": presence.get_stats(),
        })

    with app.app_context():
        db.create_all()

    return app


# --------------------------------------------------------------------------- #
# Local development runner ( `python -m tripmate.main` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    application = create_app()
    port = get_port()
    logger.info("Starting tripmate on http://localhost:%d", port)
    application.extensions["socketio"].run(
        application, host="0.0.0.0", port=port, debug=False, allow_unsafe_werkzeug=True
    )
