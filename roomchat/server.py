# ============================================
#     RoomChat - Application factory
# ============================================

import os

from flask import Flask, abort
from flask_socketio import SocketIO

import roomchat.config as config
from roomchat.state import reset
from roomchat.storage import open_stores
from roomchat.rooms import create_default_rooms
from roomchat.auth import create_auth_blueprint
from roomchat.sockets import register_session_handlers
from roomchat.cleanup import start_cleanup_task
from roomchat.logger import log_info, log_warning


def create_app(message_store=None, credential_store=None, async_mode=None):
    """
    Build the Flask app and its SocketIO server.

    Stores not injected are opened from the configured backend; this raises
    StoreUnavailable when the backend is unreachable.
    Returns (app, socketio).
    """
    if message_store is None or credential_store is None:
        opened_messages, opened_credentials = open_stores()
        message_store = message_store or opened_messages
        credential_store = credential_store or opened_credentials

    app = Flask(__name__, static_folder=config.STATIC_DIR, static_url_path="")
    socketio = SocketIO(
        app,
        cors_allowed_origins=config.CORS_ALLOWED_ORIGINS,
        async_mode=async_mode,
        max_http_buffer_size=config.SOCKETIO_MAX_BUFFER,
    )

    # fresh in-memory authority for this server
    reset()
    create_default_rooms()

    app.register_blueprint(create_auth_blueprint(credential_store))
    register_session_handlers(socketio, message_store)

    @app.route("/")
    def index():
        if not os.path.exists(os.path.join(config.STATIC_DIR, "index.html")):
            abort(404)
        return app.send_static_file("index.html")

    if config.ROOM_PRUNE_POLICY not in config.PRUNE_POLICIES:
        log_warning("server", f"Unknown ROOM_PRUNE_POLICY {config.ROOM_PRUNE_POLICY!r}, rooms are retained.")
    elif config.ROOM_PRUNE_POLICY == "ttl":
        start_cleanup_task(socketio)

    app.extensions["roomchat"] = {
        "message_store": message_store,
        "credential_store": credential_store,
    }

    log_info("server", f"Application ready (store={type(message_store).__name__}, "
                       f"prune_policy={config.ROOM_PRUNE_POLICY}).")
    return app, socketio
