"""Tests for the session store and its storage backends."""

import json

import pytest

from recruit_portal.core.models import User, UserRole
from recruit_portal.core.session import (
    TOKEN_KEY,
    USER_KEY,
    FileSessionStorage,
    MemorySessionStorage,
    SessionStore,
)


@pytest.fixture
def hr_user():
    return User(id="hr-1", email="hr@corp.test", name="Priya", role=UserRole.HR)


@pytest.fixture
def storage():
    return MemorySessionStorage()


class TestSessionStore:
    """Test suite for SessionStore."""

    def test_init_without_persisted_session(self, storage):
        store = SessionStore(storage)
        assert store.init() is None
        assert store.initialized is True
        assert store.is_authenticated is False
        assert store.user is None
        assert store.token is None

    def test_login_persists_pair(self, storage, hr_user):
        store = SessionStore(storage)
        store.init()

        session = store.login(hr_user, "token-123")

        assert session.user == hr_user
        assert store.token == "token-123"
        assert storage.items[TOKEN_KEY] == "token-123"
        assert json.loads(storage.items[USER_KEY])["role"] == "hr"

    def test_restore_after_restart(self, storage, hr_user):
        SessionStore(storage).login(hr_user, "token-123")

        restored = SessionStore(storage)
        session = restored.init()

        assert session is not None
        assert restored.user == hr_user
        assert restored.user.role == UserRole.HR
        assert restored.token == "token-123"

    def test_corrupted_identity_is_discarded(self):
        storage = MemorySessionStorage({USER_KEY: "{not json", TOKEN_KEY: "token-123"})
        store = SessionStore(storage)

        assert store.init() is None
        assert store.is_authenticated is False
        assert USER_KEY not in storage.items

    def test_identity_with_wrong_shape_is_discarded(self):
        storage = MemorySessionStorage({USER_KEY: json.dumps(["hr"]), TOKEN_KEY: "token-123"})
        store = SessionStore(storage)

        assert store.init() is None
        assert USER_KEY not in storage.items

    def test_identity_with_unknown_role_is_discarded(self):
        raw = json.dumps({"id": "u1", "role": "superuser"})
        storage = MemorySessionStorage({USER_KEY: raw, TOKEN_KEY: "token-123"})

        assert SessionStore(storage).init() is None
        assert USER_KEY not in storage.items

    def test_token_without_identity_is_logged_out(self):
        storage = MemorySessionStorage({TOKEN_KEY: "token-123"})
        assert SessionStore(storage).init() is None

    def test_identity_without_token_is_logged_out(self, hr_user):
        storage = MemorySessionStorage({USER_KEY: json.dumps(hr_user.model_dump(mode="json"))})
        assert SessionStore(storage).init() is None

    def test_logout_clears_both_copies(self, storage, hr_user):
        store = SessionStore(storage)
        store.login(hr_user, "token-123")

        store.logout()

        assert store.is_authenticated is False
        assert storage.items == {}

    def test_teardown(self, storage, hr_user):
        store = SessionStore(storage)
        store.init()
        store.login(hr_user, "token-123")

        store.teardown()

        assert store.initialized is False
        assert store.current is None
        assert SessionStore(storage).init() is None

    def test_login_replaces_previous_pair(self, storage, hr_user):
        store = SessionStore(storage)
        store.login(hr_user, "token-1")
        applicant = User(id="u-9", email="seeker@mail.test", role=UserRole.APPLICANT)

        store.login(applicant, "token-2")

        assert store.user == applicant
        assert store.token == "token-2"


class TestUserParsing:
    """Tests for identity payloads from the auth provider."""

    def test_role_and_name_lifted_from_metadata(self):
        user = User.model_validate({
            "id": "u1",
            "email": "a@b.test",
            "user_metadata": {"name": "Asha", "role": "hr"},
        })
        assert user.role == UserRole.HR
        assert user.name == "Asha"

    def test_missing_role_defaults_to_applicant(self):
        user = User.model_validate({"id": "u1", "email": "a@b.test"})
        assert user.role == UserRole.APPLICANT
        assert user.display_name == "User"

    def test_hr_display_name_fallback(self):
        assert User(id="h", role=UserRole.HR).display_name == "HR Manager"


class TestFileSessionStorage:
    """Tests for the file-backed storage."""

    def test_round_trip_through_disk(self, tmp_path, hr_user):
        path = tmp_path / "nested" / "session.json"
        SessionStore(FileSessionStorage(path)).login(hr_user, "token-abc")

        assert path.exists()
        restored = SessionStore(FileSessionStorage(path))
        restored.init()
        assert restored.user == hr_user
        assert restored.token == "token-abc"

    def test_unreadable_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("garbage", encoding="utf-8")
        storage = FileSessionStorage(path)

        assert storage.get_item(TOKEN_KEY) is None
        storage.set_item(TOKEN_KEY, "t")
        assert json.loads(path.read_text(encoding="utf-8")) == {TOKEN_KEY: "t"}

    def test_remove_item(self, tmp_path):
        storage = FileSessionStorage(tmp_path / "session.json")
        storage.set_item("a", "1")
        storage.set_item("b", "2")

        storage.remove_item("a")

        assert storage.get_item("a") is None
        assert storage.get_item("b") == "2"
