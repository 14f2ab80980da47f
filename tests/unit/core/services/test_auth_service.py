"""Tests for AuthService."""

import hashlib
import logging

import pytest

from smartnote.core.exceptions import DuplicateError, ValidationError
from smartnote.core.services import AuthService, NotebookSession
from smartnote.security import identify


@pytest.fixture
def auth(database):
    return AuthService(database)


@pytest.fixture
async def registered(auth):
    return await auth.register("writer", "secret123", email="writer@example.com", full_name="Writer")


class TestRegister:
    async def test_register_hashes_password(self, auth, user_repo, registered):
        assert registered.username == "writer"

        _, password_hash = await user_repo.get_credentials("writer")
        assert password_hash != "secret123"
        assert identify(password_hash) == "bcrypt_sha256"

    async def test_register_duplicate(self, auth, registered):
        with pytest.raises(DuplicateError):
            await auth.register("writer", "another1")

    @pytest.mark.parametrize(
        "username, password",
        [
            ("ab", "secret123"),
            ("bad name", "secret123"),
            ("writer2", "12345"),
            ("writer2", "x" * 129),
        ],
    )
    async def test_register_rules(self, auth, username, password):
        with pytest.raises(ValidationError):
            await auth.register(username, password)


class TestLogin:
    async def test_login_opens_session(self, auth, registered):
        session = await auth.login("writer", "secret123")

        assert isinstance(session, NotebookSession)
        assert session.user.id == registered.id
        assert session.user_id == registered.id
        assert session.notes.user_id == registered.id
        assert session.tags.user_id == registered.id
        assert session.versions.user_id == registered.id

    async def test_wrong_password_and_unknown_user_look_the_same(self, auth, registered):
        assert await auth.login("writer", "wrong-password") is None
        assert await auth.login("nobody", "secret123") is None
        assert await auth.login("", "") is None

    async def test_inactive_user_cannot_login(self, auth, user_repo, registered):
        await user_repo.deactivate(registered.id)

        assert await auth.login("writer", "secret123") is None

    async def test_unreadable_stored_hash(self, auth, user_repo):
        await user_repo.create("broken", "not-a-real-hash")

        assert await auth.login("broken", "whatever") is None

    async def test_legacy_hash_upgraded_on_login(self, auth, user_repo, caplog):
        legacy = hashlib.md5(b"oldsecret").hexdigest()
        veteran = await user_repo.create("veteran", legacy)
        caplog.set_level(logging.INFO, logger="smartnote.core.services.auth_service")

        assert await auth.login("veteran", "oldsecret") is not None
        assert f"Upgrading hex_md5 password hash of user {veteran.id}" in caplog.text

        _, password_hash = await user_repo.get_credentials("veteran")
        assert identify(password_hash) == "bcrypt_sha256"
        assert await auth.login("veteran", "oldsecret") is not None

    async def test_session_is_frozen(self, auth, registered):
        session = await auth.login("writer", "secret123")

        with pytest.raises(AttributeError):
            session.user = None


class TestChangePassword:
    async def test_change_password(self, auth, registered):
        assert await auth.change_password(registered.id, "secret123", "newsecret1") is True

        assert await auth.login("writer", "secret123") is None
        assert await auth.login("writer", "newsecret1") is not None

    async def test_wrong_current_password(self, auth, registered):
        assert await auth.change_password(registered.id, "nope", "newsecret1") is False
        assert await auth.login("writer", "secret123") is not None

    async def test_new_password_rules(self, auth, registered):
        with pytest.raises(ValidationError):
            await auth.change_password(registered.id, "secret123", "short")

    async def test_unknown_user(self, auth):
        assert await auth.change_password(999, "secret123", "newsecret1") is False
