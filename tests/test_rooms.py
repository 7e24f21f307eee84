import pytest

import roomchat.config as config
from roomchat import state
from roomchat.rooms import (
    active_rooms,
    add,
    cleanup_rooms,
    create_default_rooms,
    ensure,
    is_valid_room_name,
    members_of,
    normalize_room_name,
    prune_if_empty,
    remove,
    remove_from_all,
    room_exists,
)
from roomchat.users import bind, get_active_room, unbind


def _join(sid, name, room):
    bind(sid, name)
    ensure(room)
    remove_from_all(sid)
    add(room, sid)


def _assert_registry_matches_directory():
    for sid, entry in state.connections.items():
        holding = [room for room, members in state.rooms.items() if sid in members]
        if entry["room"] is None:
            assert holding == []
        else:
            assert holding == [entry["room"]]


def test_normalize_room_name_is_idempotent():
    assert normalize_room_name("Lobby") == "lobby"
    assert normalize_room_name(" LOBBY ") == "lobby"
    assert normalize_room_name(normalize_room_name("LoBbY")) == "lobby"


@pytest.mark.parametrize("name,valid", [
    ("general", True),
    ("  x ", True),
    ("", False),
    ("   ", False),
    (None, False),
    (123, False),
    ("r" * 65, False),
])
def test_is_valid_room_name(name, valid):
    assert is_valid_room_name(name) is valid


def test_ensure_is_idempotent():
    assert ensure("general") is True
    add("general", "sid-1")

    assert ensure("general") is False
    assert members_of("general") == ["sid-1"]


def test_add_and_remove():
    bind("sid-1", "alice")
    ensure("general")
    add("general", "sid-1")

    assert members_of("general") == ["sid-1"]
    assert get_active_room("sid-1") == "general"

    assert remove("general", "sid-1") is True
    assert members_of("general") == []
    assert get_active_room("sid-1") is None

    # removing again (or from an unknown room) is a no-op
    assert remove("general", "sid-1") is False
    assert remove("nowhere", "sid-1") is False


def test_members_keep_join_order():
    ensure("general")
    for sid in ("c", "a", "b"):
        bind(sid, sid.upper())
        add("general", sid)

    assert members_of("general") == ["c", "a", "b"]
    assert active_rooms() == {"general": ["C", "A", "B"]}


def test_remove_from_all_reports_rooms_left():
    _join("sid-1", "alice", "general")
    ensure("random")

    assert remove_from_all("sid-1") == ["general"]
    assert remove_from_all("sid-1") == []


def test_switching_rooms_keeps_single_membership():
    for room in ("general", "random", "general", "music", "random"):
        _join("sid-1", "alice", room)
        _assert_registry_matches_directory()
        holding = [r for r, members in state.rooms.items() if "sid-1" in members]
        assert holding == [room]


def test_active_rooms_skips_empty_rooms_and_unbound_members():
    ensure("empty")
    _join("sid-1", "alice", "general")
    ensure("lurkers")
    add("lurkers", "ghost")  # never bound

    assert active_rooms() == {"general": ["alice"], "lurkers": []}


def test_empty_rooms_are_retained_by_default(monkeypatch):
    monkeypatch.setattr(config, "ROOM_PRUNE_POLICY", "retain")
    _join("sid-1", "alice", "general")
    remove_from_all("sid-1")

    assert prune_if_empty("general") is False
    assert room_exists("general")
    assert "general" not in active_rooms()


def test_immediate_policy_prunes_empty_room(monkeypatch):
    monkeypatch.setattr(config, "ROOM_PRUNE_POLICY", "immediate")
    _join("sid-1", "alice", "general")
    _join("sid-2", "bob", "general")

    remove_from_all("sid-1")
    assert prune_if_empty("general") is False  # bob is still inside

    remove_from_all("sid-2")
    assert prune_if_empty("general") is True
    assert not room_exists("general")
    assert "general" not in state.rooms_meta


def test_default_rooms_are_never_pruned(monkeypatch):
    monkeypatch.setattr(config, "ROOM_PRUNE_POLICY", "immediate")
    monkeypatch.setattr(config, "DEFAULT_ROOMS", ["Público"])
    create_default_rooms()

    assert room_exists("público")
    assert prune_if_empty("público") is False
    assert room_exists("público")


def test_ttl_cleanup(monkeypatch):
    monkeypatch.setattr(config, "ROOM_PRUNE_POLICY", "ttl")
    monkeypatch.setattr(config, "ROOM_TTL_SECONDS", 60)

    ensure("stale")
    ensure("busy")
    _join("sid-1", "alice", "busy")
    ensure("default", default=True)

    emptied_at = state.rooms_meta["stale"]["last_empty"]

    assert cleanup_rooms(now=emptied_at + 30) == []
    assert cleanup_rooms(now=emptied_at + 61) == ["stale"]
    assert not room_exists("stale")
    assert room_exists("busy")
    assert room_exists("default")


def test_ttl_cleanup_inactive_under_other_policies(monkeypatch):
    monkeypatch.setattr(config, "ROOM_PRUNE_POLICY", "retain")
    ensure("stale")

    assert cleanup_rooms(now=state.rooms_meta["stale"]["last_empty"] + 10 ** 6) == []
    assert room_exists("stale")


def test_unbind_after_removal_keeps_last_name_available():
    _join("sid-1", "alice", "general")
    left = remove_from_all("sid-1")

    # name still resolvable for departure notices
    assert left == ["general"]
    assert state.connections["sid-1"]["username"] == "alice"

    unbind("sid-1")
    assert "sid-1" not in state.connections
