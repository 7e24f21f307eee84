# ============================================
#     RoomChat - Global Configuration
# ============================================

import os

# =========================================
#   ENVIRONMENT
# =========================================
# Expected values: "dev", "prod"
ENV = os.getenv("ENV", "dev").lower()

IS_PROD = ENV == "prod"

PORT = int(os.getenv("PORT", "3000"))

# =========================================
#   PATHS - PERSISTENCE ROOT
# =========================================
# In prod everything durable lives under /var/data.
# In dev, we default to a local folder inside the repo: ./var/data
#
# Override with ROOMCHAT_PERSIST_ROOT=/custom/path

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

PERSIST_ROOT = (
    os.getenv("ROOMCHAT_PERSIST_ROOT")
    or ("/var/data" if IS_PROD else os.path.join(PROJECT_ROOT, "var", "data"))
)

# JSON store layout
MESSAGES_DIR = os.path.join(PERSIST_ROOT, "messages")
USERS_FILE = os.path.join(PERSIST_ROOT, "users.json")

# Static client assets (index.html, js, css)
STATIC_DIR = os.getenv("ROOMCHAT_STATIC_DIR", os.path.join(PROJECT_ROOT, "public"))

# Logs persistence
LOG_DIR = os.path.join(PERSIST_ROOT, "logs")
DEFAULT_LOG_FILE = os.path.join(LOG_DIR, "roomchat.log")
LOG_FILE = os.getenv("ROOMCHAT_LOG_FILE", DEFAULT_LOG_FILE)
LOG_LEVEL = os.getenv("ROOMCHAT_LOG_LEVEL", "INFO").upper()
LOGGER_NAME = os.getenv("ROOMCHAT_LOGGER_NAME", "roomchat")
LOG_BACKUP_DAYS = int(os.getenv("ROOMCHAT_LOG_BACKUP_DAYS", "30"))

# Ensure folders exist at startup
os.makedirs(MESSAGES_DIR, exist_ok=True)
os.makedirs(os.path.dirname(LOG_FILE) or LOG_DIR, exist_ok=True)

# =========================================
#   STORE BACKEND
# =========================================
#   - "mongo": MongoDB through pymongo (MONGO_URI required)
#   - "json":  atomic JSON files under PERSIST_ROOT

MONGO_URI = os.getenv("MONGO_URI", "")
MONGO_DB = os.getenv("MONGO_DB", "roomchat")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

STORE_BACKEND = os.getenv("ROOMCHAT_STORE", "mongo" if MONGO_URI else "json").lower()

# =========================================
#   ROOMS
# =========================================
# Rooms created at startup. Never pruned.
DEFAULT_ROOMS = [
    r.strip().lower()
    for r in os.getenv("ROOMCHAT_DEFAULT_ROOMS", "público").split(",")
    if r.strip()
]

# What happens to a room once its last member leaves:
#   "retain"    -> kept forever (empty rooms are only hidden from the active list)
#   "immediate" -> removed from the directory right away
#   "ttl"       -> removed by the cleanup task after ROOM_TTL_SECONDS
ROOM_PRUNE_POLICY = os.getenv("ROOM_PRUNE_POLICY", "retain").lower()
PRUNE_POLICIES = ("retain", "immediate", "ttl")

ROOM_TTL_SECONDS = int(os.getenv("ROOM_TTL_SECONDS", str(60 * 10)))
CLEANUP_INTERVAL_SECONDS = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "60"))

# =========================================
#   GENERAL PARAMETERS
# =========================================
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "50"))             # Replayed on join
HISTORY_RETENTION = int(os.getenv("HISTORY_RETENTION", "1000"))   # Kept per room (JSON store)
MAX_MESSAGE_LENGTH = int(os.getenv("MAX_MESSAGE_LENGTH", "2000"))  # Text body (chars)
MAX_MEDIA_LENGTH = int(os.getenv("MAX_MEDIA_LENGTH", "8000000"))   # Encoded audio/image (chars)
MAX_USERNAME_LENGTH = int(os.getenv("MAX_USERNAME_LENGTH", "32"))
MAX_ROOM_NAME_LENGTH = int(os.getenv("MAX_ROOM_NAME_LENGTH", "64"))

# Socket.IO payload cap; must fit an encoded image or audio clip
SOCKETIO_MAX_BUFFER = int(os.getenv("SOCKETIO_MAX_BUFFER", "10000000"))

CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "*")
