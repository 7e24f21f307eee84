# ============================================
#     RoomChat - History replay
# ============================================

from flask_socketio import emit

from roomchat.config import HISTORY_LIMIT
from roomchat.storage import StoreError
from roomchat.logger import log_info, log_exception


def send_room_history(message_store, room, sid):
    """
    Send the most recent HISTORY_LIMIT messages of `room` (oldest first)
    to a single connection as "previous-messages".

    A store failure is reported to that connection only ("room-error").
    """
    try:
        records = message_store.find_by_room(room, limit=HISTORY_LIMIT)
    except StoreError:
        log_exception("history", f"Could not load history of '{room}' for sid={sid}")
        emit("room-error", "Could not load previous messages.", to=sid)
        return None

    emit("previous-messages", [r.to_wire() for r in records], to=sid)
    log_info("history", f"Sent {len(records)} messages of '{room}' to sid={sid}.")
    return records
