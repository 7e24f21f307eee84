# ============================================
#     RoomChat - Room Directory
#     room name → members, lazy creation, pruning policy
# ============================================

import time

import roomchat.config as config
from roomchat.state import rooms, rooms_meta
from roomchat.users import lookup, get_active_room, set_active_room
from roomchat.logger import log_info, log_warning


# =====================================================
#   ROOM NAME NORMALIZATION
# =====================================================

def normalize_room_name(name: str) -> str:
    """Lookup key of a room: stripped and lowercased. Idempotent."""
    return name.strip().lower()


def is_valid_room_name(name) -> bool:
    if not isinstance(name, str):
        return False
    name = name.strip()
    return 0 < len(name) <= config.MAX_ROOM_NAME_LENGTH


# =====================================================
#   LIFECYCLE
# =====================================================

def room_exists(room) -> bool:
    return room in rooms


def ensure(room, default=False) -> bool:
    """
    Create an empty room if absent. Returns True when the room was created,
    False when it already existed.
    """
    if room in rooms:
        return False

    now = time.time()
    rooms[room] = {}
    rooms_meta[room] = {
        "default": default,
        "created_at": now,
        "last_empty": now,
    }
    log_info("rooms", f"Room created: {room} (default={default})")
    return True


def create_default_rooms():
    for room in config.DEFAULT_ROOMS:
        ensure(normalize_room_name(room), default=True)


def delete_room(room):
    members = rooms.pop(room, None)
    rooms_meta.pop(room, None)
    if members:
        # Never expected: callers only delete empty rooms
        log_warning("rooms", f"Deleted room {room} with {len(members)} members still inside")
    log_info("rooms", f"Room deleted: {room}")


# =====================================================
#   MEMBERSHIP
# =====================================================

def add(room, sid):
    """Insert a connection into an existing room and mark it as its active room."""
    members = rooms[room]
    members[sid] = time.time()
    rooms_meta[room]["last_empty"] = None
    set_active_room(sid, room)


def remove(room, sid) -> bool:
    """Remove a connection from a room. No-op if it is not a member."""
    members = rooms.get(room)
    if members is None or sid not in members:
        return False

    del members[sid]
    if get_active_room(sid) == room:
        set_active_room(sid, None)

    if not members:
        rooms_meta[room]["last_empty"] = time.time()
    return True


def remove_from_all(sid):
    """Remove a connection from every room; return the rooms it actually left."""
    left = [room for room, members in rooms.items() if sid in members]
    for room in left:
        remove(room, sid)
    return left


def members_of(room):
    """Member sids of a room in join order (empty list for unknown rooms)."""
    return list(rooms.get(room, ()))


def active_rooms():
    """
    Public presence snapshot: {room: [display names]} for rooms with at
    least one member. Unbound members are not listed.
    """
    snapshot = {}
    for room, members in rooms.items():
        if not members:
            continue
        snapshot[room] = [
            name for name in (lookup(sid) for sid in members) if name is not None
        ]
    return snapshot


# =====================================================
#   PRUNING POLICY
# =====================================================

def _prunable(room) -> bool:
    meta = rooms_meta.get(room)
    if meta is None or meta.get("default"):
        return False
    return not rooms.get(room)


def prune_if_empty(room) -> bool:
    """
    Apply the "immediate" policy after a departure. Other policies keep
    the room; "ttl" leaves it to cleanup_rooms().
    """
    if config.ROOM_PRUNE_POLICY != "immediate":
        return False
    if not _prunable(room):
        return False

    delete_room(room)
    return True


def cleanup_rooms(now=None):
    """
    "ttl" policy: delete non-default rooms that have been empty for longer
    than ROOM_TTL_SECONDS. Returns the deleted room names.
    """
    if config.ROOM_PRUNE_POLICY != "ttl":
        return []

    now = time.time() if now is None else now
    to_delete = []

    for room, meta in list(rooms_meta.items()):
        if not _prunable(room):
            continue

        last_empty = meta.get("last_empty")
        if last_empty is None:
            continue

        idle = now - last_empty
        if idle > config.ROOM_TTL_SECONDS:
            to_delete.append(room)
            log_info("rooms", f"Delete empty room {room} (idle={idle:.1f}s)")

    for room in to_delete:
        delete_room(room)

    return to_delete
