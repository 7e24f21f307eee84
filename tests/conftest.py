"""Test configuration and fixtures."""
import os
import tempfile

# Must be set before roomchat.config is imported
os.environ.setdefault("ROOMCHAT_PERSIST_ROOT", tempfile.mkdtemp(prefix="roomchat-tests-"))
os.environ.setdefault("ROOMCHAT_STORE", "json")
os.environ.setdefault("ROOMCHAT_DEFAULT_ROOMS", "público")

import pytest

from roomchat import state
from roomchat.server import create_app
from roomchat.storage import (
    CredentialStore,
    JsonCredentialStore,
    JsonMessageStore,
    MessageStore,
    StoreError,
)


class FailingMessageStore(MessageStore):
    """Every call fails like an unreachable database."""

    def __init__(self):
        self.saved = []

    def save(self, record):
        self.saved.append(record)
        raise StoreError("store unavailable")

    def find_by_room(self, room, limit=50):
        raise StoreError("store unavailable")


class FailingCredentialStore(CredentialStore):
    def find_by_username(self, name):
        raise StoreError("store unavailable")

    def create(self, name, secret):
        raise StoreError("store unavailable")


@pytest.fixture(autouse=True)
def clean_state():
    state.reset()
    yield
    state.reset()


@pytest.fixture
def message_store(tmp_path):
    return JsonMessageStore(str(tmp_path / "messages"))


@pytest.fixture
def credential_store(tmp_path):
    return JsonCredentialStore(str(tmp_path / "users.json"))


@pytest.fixture
def server(message_store, credential_store):
    return create_app(message_store, credential_store, async_mode="threading")


@pytest.fixture
def failing_server(credential_store):
    return create_app(FailingMessageStore(), credential_store, async_mode="threading")


def _client_factory(server):
    app, socketio = server
    clients = []

    def _connect():
        client = socketio.test_client(app)
        assert client.is_connected()
        # drop the roster sent on connect
        client.get_received()
        clients.append(client)
        return client

    return _connect, clients


@pytest.fixture
def connect(server):
    factory, clients = _client_factory(server)
    yield factory
    for client in clients:
        if client.is_connected():
            client.disconnect()


@pytest.fixture
def connect_failing(failing_server):
    factory, clients = _client_factory(failing_server)
    yield factory
    for client in clients:
        if client.is_connected():
            client.disconnect()


def args_of(received, name):
    """Argument lists of every received event called `name`."""
    return [event["args"] for event in received if event["name"] == name]


def sid_of(username):
    for sid, entry in state.connections.items():
        if entry.get("username") == username:
            return sid
    return None
