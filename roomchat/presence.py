# ============================================
#     RoomChat - Presence Broadcaster
# ============================================

from roomchat.rooms import active_rooms, members_of
from roomchat.logger import log_info


def publish_active_rooms(socketio):
    """
    Recompute the {room: [names]} snapshot and push it to every connected
    client. No debouncing: one call, one full snapshot.
    """
    snapshot = active_rooms()
    socketio.emit("active-rooms-list", snapshot, namespace="/")
    log_info("presence", f"Published {len(snapshot)} active rooms.")
    return snapshot


def emit_to_room(socketio, room, event, *args):
    """
    Fan an event out to the current members of a room, each addressed
    through its own sid room.
    """
    members = members_of(room)
    for sid in members:
        socketio.emit(event, *args, to=sid, namespace="/")
    return members
