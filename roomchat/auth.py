# ============================================
#   RoomChat - Auth REST routes (register / login)
# ============================================

from flask import Blueprint, jsonify, request

from roomchat.users import clean_username
from roomchat.storage import StoreError, DuplicateUserError
from roomchat.logger import log_info, log_warning, log_exception

MIN_PASSWORD_LENGTH = 4


def _read_credentials():
    data = request.get_json(silent=True) or {}
    username = clean_username(data.get("username"))
    password = data.get("password")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        password = None
    return username, password


def create_auth_blueprint(credential_store):
    bp = Blueprint("auth", __name__, url_prefix="/api")

    # -----------------------------------------
    # REGISTER
    # -----------------------------------------
    @bp.route("/register", methods=["POST"])
    def register():
        username, password = _read_credentials()
        if not username or not password:
            return jsonify({"message": "Username and password are required."}), 400

        log_info("auth", f"Register request for {username!r}")

        try:
            if credential_store.find_by_username(username):
                return jsonify({"message": "Username already exists."}), 400

            user = credential_store.create(username, password)
        except DuplicateUserError:
            return jsonify({"message": "Username already exists."}), 400
        except StoreError:
            log_exception("auth", f"Register failed for {username!r}")
            return jsonify({"message": "Server error while registering user."}), 500

        return jsonify({
            "message": "User registered successfully!",
            "username": user["username"],
        }), 201

    # -----------------------------------------
    # LOGIN
    # -----------------------------------------
    @bp.route("/login", methods=["POST"])
    def login():
        username, password = _read_credentials()
        if not username or not password:
            return jsonify({"message": "Invalid credentials."}), 400

        try:
            user = credential_store.find_by_username(username)
        except StoreError:
            log_exception("auth", f"Login failed for {username!r}")
            return jsonify({"message": "Server error while logging in."}), 500

        if not credential_store.verify_secret(user, password):
            log_warning("auth", f"Invalid credentials for {username!r}")
            return jsonify({"message": "Invalid credentials."}), 400

        log_info("auth", f"Login ok for {username!r}")
        return jsonify({
            "message": "Login successful!",
            "username": user["username"],
        }), 200

    return bp
