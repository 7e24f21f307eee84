# ============================================
#   RoomChat - Room Session Protocol (Socket.IO handlers)
# ============================================
#
# Per connection:  connected → identified(name) → in room(name, room) → gone
#
# Each handler mutates the registry/directory without yielding; only the
# store calls (history fetch, message save) can suspend.

from flask import request
from flask_socketio import emit

from roomchat.users import clean_username, register_connection, bind, lookup, unbind
from roomchat.rooms import (
    normalize_room_name,
    is_valid_room_name,
    room_exists,
    ensure,
    add,
    remove_from_all,
    prune_if_empty,
    active_rooms,
)
from roomchat.presence import publish_active_rooms, emit_to_room
from roomchat.history import send_room_history
from roomchat.relay import relay_chat_message
from roomchat.logger import log_info, log_warning


def register_session_handlers(socketio, message_store):

    def _reject(message, detail):
        log_warning("sockets", f"sid={request.sid}: {detail}")
        emit("room-error", message, to=request.sid)

    # -----------------------------------------
    # CONNECT
    # -----------------------------------------
    @socketio.on("connect", namespace="/")
    def on_connect(auth=None):
        register_connection(request.sid)
        # the newcomer gets the current roster right away
        emit("active-rooms-list", active_rooms(), to=request.sid)
        log_info("sockets", f"Client connected: sid={request.sid}")

    # -----------------------------------------
    # SET USERNAME
    # -----------------------------------------
    @socketio.on("set-username", namespace="/")
    def on_set_username(name=None):
        username = clean_username(name)
        if username is None:
            _reject("Invalid username.", f"set-username rejected ({name!r})")
            return

        bind(request.sid, username)
        log_info("sockets", f'Username "{username}" bound to sid={request.sid}')

        publish_active_rooms(socketio)

    # -----------------------------------------
    # CREATE ROOM (does not join)
    # -----------------------------------------
    @socketio.on("create-room", namespace="/")
    def on_create_room(room_name=None, username=None):
        if not is_valid_room_name(room_name):
            _reject("Invalid room name.", f"create-room rejected ({room_name!r})")
            return

        room = normalize_room_name(room_name)

        if room_exists(room):
            _reject(f'Room "{room_name}" already exists.', f"create-room conflict on {room}")
            return

        ensure(room)
        emit("room-created", room_name, to=request.sid)
        log_info("sockets", f'Room "{room_name}" created by {username or request.sid}.')

        publish_active_rooms(socketio)

    # -----------------------------------------
    # JOIN ROOM (switches away from any previous room)
    # -----------------------------------------
    @socketio.on("join-room", namespace="/")
    def on_join_room(room_name=None, username=None):
        sid = request.sid

        if not is_valid_room_name(room_name):
            _reject("Invalid room name.", f"join-room rejected ({room_name!r})")
            return

        # A join without a name keeps the identity already bound
        username = clean_username(username) if username is not None else lookup(sid)
        if username is None:
            _reject("Invalid username.", f"join-room to {room_name!r} without a usable name")
            return

        room = normalize_room_name(room_name)

        if ensure(room):
            log_info("sockets", f'Room "{room_name}" did not exist, created on join by {username}.')

        for old_room in remove_from_all(sid):
            if old_room != room:
                prune_if_empty(old_room)

        bind(sid, username)
        add(room, sid)

        emit("room-joined", room_name, to=sid)
        emit_to_room(socketio, room, "user-connected", username)
        log_info("sockets", f'"{username}" joined room {room}.')

        send_room_history(message_store, room, sid)

        publish_active_rooms(socketio)

    # -----------------------------------------
    # CHAT MESSAGE
    # -----------------------------------------
    @socketio.on("chat-message", namespace="/")
    def on_chat_message(data=None):
        relay_chat_message(socketio, message_store, request.sid, data)

    # -----------------------------------------
    # ACTIVE ROOMS (on demand, to everyone)
    # -----------------------------------------
    @socketio.on("request-active-rooms", namespace="/")
    def on_request_active_rooms(*args):
        publish_active_rooms(socketio)

    # -----------------------------------------
    # DISCONNECT
    # -----------------------------------------
    @socketio.on("disconnect", namespace="/")
    def on_disconnect(reason=None):
        sid = request.sid
        username = lookup(sid)

        for room in remove_from_all(sid):
            if username:
                emit_to_room(socketio, room, "user-disconnected", username)
            prune_if_empty(room)

        unbind(sid)
        log_info("sockets", f"Client {username or sid} disconnected.")

        publish_active_rooms(socketio)
