# ============================================
#   RoomChat - Persistence
#   Message Store + Credential Store contracts,
#   JSON file backend (atomic writes)
# ============================================

import os
import json
import threading
import time
import uuid
import hashlib

from pydantic import ValidationError

from roomchat.config import (
    STORE_BACKEND,
    MESSAGES_DIR,
    USERS_FILE,
    HISTORY_LIMIT,
    HISTORY_RETENTION,
)
from roomchat.messages import load_chat_message
from roomchat.passwords import hash_secret, check_secret
from roomchat.logger import log_info, log_exception


# =====================================================
#   ERRORS
# =====================================================

class StoreError(Exception):
    """A store read or write failed."""


class StoreUnavailable(StoreError):
    """The store could not be opened at all (fatal at startup)."""


class DuplicateUserError(StoreError):
    """create() on a username that already exists."""


# =====================================================
#   CONTRACTS
# =====================================================

class MessageStore:
    """Durable chat history, queried per (normalized) room."""

    def save(self, record):
        """Persist a record; return it with its assigned id."""
        raise NotImplementedError

    def find_by_room(self, room, limit=HISTORY_LIMIT):
        """The `limit` most recent records of a room, oldest first."""
        raise NotImplementedError

    def close(self):
        pass


class CredentialStore:
    """Registered users: {"username", "password_hash", "created_at"}."""

    def find_by_username(self, name):
        raise NotImplementedError

    def create(self, name, secret):
        raise NotImplementedError

    def verify_secret(self, user, candidate) -> bool:
        if not user:
            return False
        return check_secret(user.get("password_hash"), candidate)

    def close(self):
        pass


def recent_history(records, limit):
    """Sort by timestamp (stable) and keep the `limit` most recent, oldest first."""
    if limit is not None and limit <= 0:
        return []
    ordered = sorted(records, key=lambda r: r.timestamp)
    if limit is None:
        return ordered
    return ordered[-limit:]


# =====================================================
#   JSON HELPERS
# =====================================================

def _read_json(path: str, default):
    """
    Read a JSON file; `default` when missing.
    Corrupt files raise StoreError (never silently emptied).
    """
    if not os.path.exists(path):
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise StoreError(f"Cannot read {path}: {e}") from e


def _atomic_write_json(path: str, payload):
    """
    Atomic JSON write to avoid corruption on crash/restart:
    write temp file then os.replace().
    """
    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        try:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        except OSError:
            pass
        raise StoreError(f"Cannot write {path}: {e}") from e


# =====================================================
#   JSON MESSAGE STORE
# =====================================================

class JsonMessageStore(MessageStore):
    """One JSON list per room under `messages_dir`, capped at `retention`."""

    def __init__(self, messages_dir=MESSAGES_DIR, retention=HISTORY_RETENTION):
        self.messages_dir = messages_dir
        self.retention = retention
        self._lock = threading.Lock()

        try:
            os.makedirs(messages_dir, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Cannot create {messages_dir}: {e}") from e

    def room_path(self, room):
        # fixed-length name: every valid room fits the filesystem name limit
        digest = hashlib.sha256(room.encode("utf-8")).hexdigest()
        return os.path.join(self.messages_dir, f"{digest}.json")

    def _load_docs(self, room):
        docs = _read_json(self.room_path(room), [])
        if not isinstance(docs, list):
            raise StoreError(f"History file of {room} is not a list")
        return docs

    def save(self, record):
        saved = record.model_copy(update={"id": uuid.uuid4().hex})

        with self._lock:
            docs = self._load_docs(saved.room)
            docs.append(saved.model_dump(mode="json"))

            if self.retention and len(docs) > self.retention:
                docs = docs[-self.retention:]

            _atomic_write_json(self.room_path(saved.room), docs)

        log_info("storage", f"Message saved in {saved.room} (total={len(docs)}).")
        return saved

    def find_by_room(self, room, limit=HISTORY_LIMIT):
        with self._lock:
            docs = self._load_docs(room)

        records = []
        for doc in docs:
            try:
                records.append(load_chat_message(doc))
            except ValidationError:
                log_exception("storage", f"Skipping unreadable record in {room}")
        return recent_history(records, limit)


# =====================================================
#   JSON CREDENTIAL STORE
# =====================================================

class JsonCredentialStore(CredentialStore):
    """All users in a single JSON object keyed by username."""

    def __init__(self, users_file=USERS_FILE):
        self.users_file = users_file
        self._lock = threading.Lock()

        try:
            os.makedirs(os.path.dirname(users_file) or ".", exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Cannot create directory for {users_file}: {e}") from e

    def _load(self):
        data = _read_json(self.users_file, {})
        if not isinstance(data, dict):
            raise StoreError("users file is not an object")
        return data

    def find_by_username(self, name):
        with self._lock:
            user = self._load().get(name)
        return dict(user) if user else None

    def create(self, name, secret):
        user = {
            "username": name,
            "password_hash": hash_secret(secret),
            "created_at": time.time(),
        }

        with self._lock:
            data = self._load()
            if name in data:
                raise DuplicateUserError(f"User {name!r} already exists")
            data[name] = user
            _atomic_write_json(self.users_file, data)

        log_info("storage", f"User created: {name}")
        return dict(user)


# =====================================================
#   BACKEND SELECTION
# =====================================================

def open_stores(backend=None):
    """
    Return (message_store, credential_store) for the configured backend.
    Raises StoreUnavailable when the backend cannot be reached.
    """
    backend = (backend or STORE_BACKEND).lower()

    if backend == "mongo":
        from roomchat.mongo import open_mongo_stores
        return open_mongo_stores()

    if backend == "json":
        log_info("storage", f"Using JSON stores under {os.path.dirname(MESSAGES_DIR)}")
        return JsonMessageStore(), JsonCredentialStore()

    raise StoreUnavailable(f"Unknown store backend: {backend!r}")
