# ============================================
#     RoomChat - Main Application
# ============================================

# -------------------------------------------------
#   EVENTLET PATCH (must run before anything else)
# -------------------------------------------------
import eventlet
eventlet.monkey_patch()

import sys

# -----------------------------------------
#   ENV VARIABLES (.env)
# -----------------------------------------
from dotenv import load_dotenv
load_dotenv()

from roomchat.config import PORT
from roomchat.server import create_app
from roomchat.storage import StoreUnavailable
from roomchat.logger import log_info, log_error

# =========================================
#   FLASK + SOCKET.IO
# =========================================
# No chat without durable storage: a store that cannot be opened is fatal.
try:
    app, socketio = create_app()
except StoreUnavailable as e:
    log_error("app", f"Fatal: message store unavailable: {e}")
    print(f"Fatal: message store unavailable: {e}", file=sys.stderr)
    sys.exit(1)

# =========================================
#   RUN SERVER
# =========================================
if __name__ == "__main__":
    log_info("app", f"Server starting on port {PORT}...")
    socketio.run(app, host="0.0.0.0", port=PORT)
