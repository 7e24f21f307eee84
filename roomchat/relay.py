# ============================================
#     RoomChat - Message Relay
#     persist first, then fan out to the room
# ============================================

from flask_socketio import emit
from pydantic import ValidationError

from roomchat.messages import build_chat_message
from roomchat.presence import emit_to_room
from roomchat.storage import StoreError
from roomchat.logger import log_info, log_warning, log_exception


def relay_chat_message(socketio, message_store, sid, data):
    """
    Validate `data`, persist it, and broadcast the persisted record to the
    members of its room. Exactly one broadcast per successful save; on any
    failure only the sender hears about it ("room-error") and nothing is
    broadcast. No retry.
    """
    if not isinstance(data, dict):
        log_warning("relay", f"Rejected non-object chat payload from sid={sid}")
        emit("room-error", "Invalid message.", to=sid)
        return None

    try:
        record = build_chat_message(data)
    except ValidationError as e:
        log_warning("relay", f"Rejected chat payload from sid={sid}: {e.error_count()} error(s)")
        emit("room-error", "Invalid message.", to=sid)
        return None

    try:
        saved = message_store.save(record)
    except StoreError:
        log_exception("relay", f"Failed to persist message in {record.room} from {record.username}")
        emit("room-error", "Could not send message.", to=sid)
        return None

    # Membership may have changed while the save was pending; use the current one.
    members = emit_to_room(socketio, saved.room, "chat-message", saved.to_wire())

    log_info(
        "relay",
        f'{saved.type} message in {saved.room} from "{saved.username}" '
        f"relayed to {len(members)} members.",
    )
    return saved
