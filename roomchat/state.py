# ============================================
#     RoomChat - Runtime Global State
# ============================================
#
# Owned by the single server process. Every Socket.IO event handler runs to
# completion against these maps before the next one touches them; the only
# yielding calls are store reads/writes, which never hold a reference across
# the map mutations.

# Live connections (Connection Registry):
# { sid: {"username": str|None, "room": str|None, "connected_at": float} }
connections = {}

# Room Directory membership, insertion-ordered:
# { room_name: {sid: joined_at, ...} }
rooms = {}

# Metadata for each room:
# rooms_meta = {
#   room_name: {
#       "default": bool,            # pre-created, never pruned
#       "created_at": float,
#       "last_empty": float|None,   # when membership last dropped to zero
#   }
# }
rooms_meta = {}


def reset():
    """Drop every connection and room (startup and tests)."""
    connections.clear()
    rooms.clear()
    rooms_meta.clear()
