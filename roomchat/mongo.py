# ============================================
#   RoomChat - MongoDB stores (pymongo)
# ============================================

from datetime import datetime, timezone

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError
from pydantic import ValidationError

from roomchat.config import MONGO_URI, MONGO_DB, MONGO_TIMEOUT_MS, HISTORY_LIMIT
from roomchat.messages import load_chat_message
from roomchat.passwords import hash_secret
from roomchat.storage import (
    CredentialStore,
    DuplicateUserError,
    MessageStore,
    StoreError,
    StoreUnavailable,
    recent_history,
)
from roomchat.logger import log_info, log_error, log_exception


def _doc_to_record(doc):
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return load_chat_message(doc)


class MongoMessageStore(MessageStore):
    """`messages` collection, indexed on (room, timestamp)."""

    def __init__(self, db, collection="messages", client=None):
        self._client = client
        self._coll = db[collection]
        self._coll.create_index([("room", ASCENDING), ("timestamp", DESCENDING)])

    def save(self, record):
        doc = record.model_dump(exclude={"id"})
        try:
            result = self._coll.insert_one(doc)
        except PyMongoError as e:
            log_exception("mongo", f"Failed saving message in {record.room}")
            raise StoreError(str(e)) from e

        return record.model_copy(update={"id": str(result.inserted_id)})

    def find_by_room(self, room, limit=HISTORY_LIMIT):
        if limit is not None and limit <= 0:
            return []

        try:
            cursor = self._coll.find({"room": room}).sort([("timestamp", DESCENDING), ("_id", DESCENDING)])
            if limit is not None:
                cursor = cursor.limit(limit)
            docs = list(cursor)
        except PyMongoError as e:
            log_exception("mongo", f"Failed loading history of {room}")
            raise StoreError(str(e)) from e

        # oldest first; ties keep insertion order
        docs.reverse()

        records = []
        for doc in docs:
            try:
                records.append(_doc_to_record(doc))
            except ValidationError:
                log_exception("mongo", f"Skipping unreadable record {doc.get('_id')} in {room}")
        return recent_history(records, limit)

    def close(self):
        if self._client is not None:
            self._client.close()


class MongoCredentialStore(CredentialStore):
    """`users` collection with a unique index on username."""

    def __init__(self, db, collection="users"):
        self._coll = db[collection]
        self._coll.create_index("username", unique=True)

    def find_by_username(self, name):
        try:
            doc = self._coll.find_one({"username": name}, {"_id": 0})
        except PyMongoError as e:
            raise StoreError(str(e)) from e
        return doc

    def create(self, name, secret):
        user = {
            "username": name,
            "password_hash": hash_secret(secret),
            "created_at": datetime.now(timezone.utc),
        }
        try:
            self._coll.insert_one(dict(user))
        except DuplicateKeyError as e:
            raise DuplicateUserError(f"User {name!r} already exists") from e
        except PyMongoError as e:
            raise StoreError(str(e)) from e

        log_info("mongo", f"User created: {name}")
        return user


def open_mongo_stores(uri=None, db_name=None):
    """
    Connect, ping and return (message_store, credential_store).
    Raises StoreUnavailable when the server is unreachable.
    """
    uri = uri or MONGO_URI
    db_name = db_name or MONGO_DB

    if not uri:
        raise StoreUnavailable("MONGO_URI is not set")

    try:
        client = MongoClient(uri, serverSelectionTimeoutMS=MONGO_TIMEOUT_MS, tz_aware=True)
        client.admin.command("ping")
        db = client[db_name]
        stores = MongoMessageStore(db, client=client), MongoCredentialStore(db)
    except PyMongoError as e:
        log_error("mongo", f"MongoDB connection failed: {e}")
        raise StoreUnavailable(f"MongoDB connection failed: {e}") from e

    log_info("mongo", f"MongoDB connected (db={db_name}).")
    return stores
