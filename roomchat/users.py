# ============================================
#     RoomChat - Connection Registry
#     sid → display name (+ active room)
# ============================================

import time

from roomchat.config import MAX_USERNAME_LENGTH
from roomchat.state import connections


# =====================================================
#   DISPLAY NAME VALIDATION
# =====================================================

def clean_username(name):
    """
    Return the stripped display name, or None when it is unusable
    (not a string, empty, or longer than MAX_USERNAME_LENGTH).
    """
    if not isinstance(name, str):
        return None

    name = name.strip()
    if not name or len(name) > MAX_USERNAME_LENGTH:
        return None
    return name


# =====================================================
#   CONNECTION LIFECYCLE
# =====================================================

def register_connection(sid):
    """Track a freshly connected, still anonymous connection."""
    return connections.setdefault(sid, {
        "username": None,
        "room": None,
        "connected_at": time.time(),
    })


# =====================================================
#   IDENTITY BINDING
# =====================================================

def bind(sid, name):
    """Associate a display name with a connection. Last write wins."""
    entry = register_connection(sid)
    entry["username"] = name
    return entry


def lookup(sid):
    """Bound display name of a connection, or None if unbound."""
    entry = connections.get(sid)
    if not entry:
        return None
    return entry.get("username")


def unbind(sid):
    """
    Forget the connection entirely. Called once, on disconnect, after the
    room departures have been computed with the last known name.
    """
    return connections.pop(sid, None)


# =====================================================
#   ACTIVE ROOM (kept in sync by roomchat.rooms)
# =====================================================

def get_active_room(sid):
    entry = connections.get(sid)
    if not entry:
        return None
    return entry.get("room")


def set_active_room(sid, room):
    entry = connections.get(sid)
    if entry is not None:
        entry["room"] = room

