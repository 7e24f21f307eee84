# ============================================
#     RoomChat - Cleanup Task ("ttl" prune policy)
# ============================================

from roomchat.config import CLEANUP_INTERVAL_SECONDS
from roomchat.rooms import cleanup_rooms
from roomchat.logger import log_info, log_exception

# Set this to True to log every cycle, not only deletions
VERBOSE_CLEANUP = False


def start_cleanup_task(socketio):
    """
    Start the recurring cleanup background task.

    Empty rooms are already absent from the presence snapshot, so a deletion
    does not trigger a publish. Default rooms are never touched.
    """
    log_info("cleanup", f"Starting cleanup task (every {CLEANUP_INTERVAL_SECONDS}s).")

    def _task():
        while True:
            try:
                socketio.sleep(CLEANUP_INTERVAL_SECONDS)

                deleted = cleanup_rooms()

                if deleted or VERBOSE_CLEANUP:
                    log_info("cleanup", f"Cleanup cycle done, deleted={deleted}")

            except Exception as e:
                log_exception("cleanup", f"Error during cleanup cycle: {e}")

    return socketio.start_background_task(_task)
