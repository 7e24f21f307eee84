import pytest

from roomchat.server import create_app

from conftest import FailingCredentialStore


@pytest.fixture
def http(server):
    app, _ = server
    return app.test_client()


def test_register_then_login(http):
    resp = http.post("/api/register", json={"username": "alice", "password": "s3cret"})
    assert resp.status_code == 201
    assert resp.get_json() == {"message": "User registered successfully!", "username": "alice"}

    resp = http.post("/api/login", json={"username": "alice", "password": "s3cret"})
    assert resp.status_code == 200
    assert resp.get_json()["username"] == "alice"


def test_register_existing_username(http):
    http.post("/api/register", json={"username": "alice", "password": "s3cret"})

    resp = http.post("/api/register", json={"username": "alice", "password": "other"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Username already exists."


@pytest.mark.parametrize("payload", [
    {},
    {"username": "alice"},
    {"password": "s3cret"},
    {"username": "   ", "password": "s3cret"},
    {"username": "alice", "password": "abc"},
])
def test_register_requires_fields(http, payload):
    resp = http.post("/api/register", json=payload)
    assert resp.status_code == 400


def test_login_wrong_password(http):
    http.post("/api/register", json={"username": "alice", "password": "s3cret"})

    resp = http.post("/api/login", json={"username": "alice", "password": "nope"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid credentials."


def test_login_unknown_user(http):
    resp = http.post("/api/login", json={"username": "ghost", "password": "s3cret"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid credentials."


def test_password_hash_is_never_returned(http, credential_store):
    resp = http.post("/api/register", json={"username": "alice", "password": "s3cret"})

    assert "password_hash" not in resp.get_json()
    assert credential_store.find_by_username("alice")["password_hash"].startswith("scrypt$")


def test_store_failure_returns_500(message_store):
    app, _ = create_app(message_store, FailingCredentialStore(), async_mode="threading")
    http = app.test_client()

    resp = http.post("/api/register", json={"username": "alice", "password": "s3cret"})
    assert resp.status_code == 500

    resp = http.post("/api/login", json={"username": "alice", "password": "s3cret"})
    assert resp.status_code == 500
