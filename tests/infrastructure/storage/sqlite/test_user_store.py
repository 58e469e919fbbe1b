"""Tests for SQLiteUserStore."""

import threading
from unittest.mock import patch

import pytest

from loanledger.core.entities import User
from loanledger.core.exceptions import DuplicateEmailError
from loanledger.core.security import hash_password, verify_password
from loanledger.infrastructure.storage.sqlite import SQLiteUserStore, get_connection

USER_STORE = "loanledger.infrastructure.storage.sqlite.user_store"


class TestSQLiteUserStore:
    async def test_create_and_get(self, db_pool, user_store: SQLiteUserStore):
        user = await user_store.create_user(
            User(name="Bo", email="Bo@Example.com", employee_code="E-7"), "pw"
        )

        fetched = await user_store.get_user(user.id)
        assert fetched.email == "bo@example.com"
        assert fetched.employee_code == "E-7"
        assert fetched.is_trainer is False

    async def test_password_is_hashed(self, db_pool, user_store: SQLiteUserStore):
        user = await user_store.create_user(User(name="Bo", email="bo@example.com"), "plain")

        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT password_hash FROM users WHERE id = ?", (user.id,)
            )
            stored = (await cursor.fetchone())[0]

        assert stored != "plain"
        assert stored.startswith("pbkdf2_sha256$")

    async def test_duplicate_email_rejected(self, db_pool, user_store: SQLiteUserStore):
        await user_store.create_user(User(name="Bo", email="bo@example.com"), "pw")

        with pytest.raises(DuplicateEmailError):
            await user_store.create_user(User(name="Other", email="BO@example.com"), "pw")

    async def test_authenticate(self, db_pool, user_store: SQLiteUserStore, borrower: User):
        assert (await user_store.authenticate("ANA@example.com", "s3cret")).id == borrower.id
        assert await user_store.authenticate("ana@example.com", "wrong") is None
        assert await user_store.authenticate("nobody@example.com", "s3cret") is None

    async def test_get_missing_returns_none(self, db_pool, user_store: SQLiteUserStore):
        assert await user_store.get_user(31337) is None

    async def test_password_hashing_runs_off_event_loop(
        self, db_pool, user_store: SQLiteUserStore
    ):
        loop_thread = threading.get_ident()
        threads: list[int] = []

        def recording_hash(password: str) -> str:
            threads.append(threading.get_ident())
            return hash_password(password)

        def recording_verify(password: str, stored: str) -> bool:
            threads.append(threading.get_ident())
            return verify_password(password, stored)

        with (
            patch(f"{USER_STORE}.hash_password", side_effect=recording_hash),
            patch(f"{USER_STORE}.verify_password", side_effect=recording_verify),
        ):
            await user_store.create_user(User(name="Bo", email="bo@example.com"), "pw")
            assert await user_store.authenticate("bo@example.com", "pw") is not None

        assert len(threads) == 2
        assert loop_thread not in threads
