"""Tests for vidtube.services.account_store against a temporary SQLite database."""

import unittest

from support import DatabaseTestCase
from vidtube.core.errors import Err, ErrorKind, Ok
from vidtube.services.account_store import AccountStore


class TestCreate(DatabaseTestCase):
    async def test_create_normalizes_identifiers(self) -> None:
        account = await self.create_account(username="  Alice ", email="Alice@Example.COM ")
        self.assertEqual(account.username, "alice")
        self.assertEqual(account.email, "alice@example.com")
        self.assertTrue(account.id)
        self.assertIsNone(account.refresh_token)

    async def test_duplicate_username_is_conflict(self) -> None:
        await self.create_account()
        result = await self.store.create(
            username="ALICE",
            email="other@example.com",
            full_name="Other",
            password_hash="x",
        )
        self.assertIsInstance(result, Err)
        self.assertEqual(result.kind, ErrorKind.CONFLICT)
        self.assertEqual(result.code, "account_exists")

    async def test_duplicate_email_is_conflict(self) -> None:
        await self.create_account()
        result = await self.store.create(
            username="bob",
            email="alice@example.com",
            full_name="Bob",
            password_hash="x",
        )
        self.assertEqual(result.kind, ErrorKind.CONFLICT)

    async def test_blank_fields_are_invalid(self) -> None:
        result = await self.store.create(username=" ", email="a@b.c", full_name="A", password_hash="x")
        self.assertEqual(result.kind, ErrorKind.INVALID_INPUT)


class TestLookups(DatabaseTestCase):
    async def test_find_by_username_or_email(self) -> None:
        account = await self.create_account()
        by_name = await self.store.find_by_username_or_email(username="ALICE")
        by_email = await self.store.find_by_username_or_email(email="alice@example.com")
        self.assertEqual(by_name.id, account.id)
        self.assertEqual(by_email.id, account.id)
        self.assertIsNone(await self.store.find_by_username_or_email(username="nobody"))
        self.assertIsNone(await self.store.find_by_username_or_email())

    async def test_public_view_has_no_secrets(self) -> None:
        account = await self.create_account()
        view = await self.store.find_public_by_id(account.id)
        self.assertEqual(view.username, "alice")
        dumped = view.model_dump()
        self.assertNotIn("password_hash", dumped)
        self.assertNotIn("refresh_token", dumped)

    async def test_missing_ids_return_none(self) -> None:
        self.assertIsNone(await self.store.find_by_id("does-not-exist"))
        self.assertIsNone(await self.store.find_public_by_id(""))


class TestUpdateFields(DatabaseTestCase):
    async def test_update_returns_fresh_view(self) -> None:
        account = await self.create_account()
        result = await self.store.update_fields(account.id, full_name="Alice L.", username="Wonder")
        self.assertIsInstance(result, Ok)
        self.assertEqual(result.value.full_name, "Alice L.")
        self.assertEqual(result.value.username, "wonder")

    async def test_update_to_taken_username_is_conflict(self) -> None:
        account = await self.create_account()
        await self.create_account(username="bob", email="bob@example.com")
        result = await self.store.update_fields(account.id, username="bob")
        self.assertEqual(result.kind, ErrorKind.CONFLICT)

    async def test_update_unknown_account_is_not_found(self) -> None:
        result = await self.store.update_fields("nope", full_name="X")
        self.assertEqual(result.kind, ErrorKind.NOT_FOUND)

    async def test_refresh_token_is_not_updatable_here(self) -> None:
        account = await self.create_account()
        with self.assertRaises(ValueError):
            await self.store.update_fields(account.id, refresh_token="x")


class TestRefreshTokenStorage(DatabaseTestCase):
    async def test_set_and_clear(self) -> None:
        account = await self.create_account()
        self.assertTrue(await self.store.set_refresh_token(account.id, "token-1"))
        self.assertEqual((await self.store.find_by_id(account.id)).refresh_token, "token-1")
        await self.store.clear_refresh_token(account.id)
        self.assertIsNone((await self.store.find_by_id(account.id)).refresh_token)
        # Clearing twice is fine.
        await self.store.clear_refresh_token(account.id)

    async def test_set_on_missing_account_returns_false(self) -> None:
        self.assertFalse(await self.store.set_refresh_token("nope", "token-1"))

    async def test_rotation_only_succeeds_once_per_token(self) -> None:
        account = await self.create_account()
        await self.store.set_refresh_token(account.id, "token-0")
        self.assertTrue(await self.store.rotate_refresh_token(account.id, "token-0", "token-1"))
        self.assertFalse(await self.store.rotate_refresh_token(account.id, "token-0", "token-2"))
        self.assertEqual((await self.store.find_by_id(account.id)).refresh_token, "token-1")

    async def test_rotation_visible_to_another_session(self) -> None:
        account = await self.create_account()
        await self.store.set_refresh_token(account.id, "token-0")
        async with self.database.session() as other:
            other_store = AccountStore(other)
            self.assertTrue(await other_store.rotate_refresh_token(account.id, "token-0", "token-1"))
        self.assertFalse(await self.store.rotate_refresh_token(account.id, "token-0", "token-2"))


class TestDelete(DatabaseTestCase):
    async def test_delete(self) -> None:
        account = await self.create_account()
        self.assertTrue(await self.store.delete(account.id))
        self.assertFalse(await self.store.delete(account.id))
        self.assertIsNone(await self.store.find_by_id(account.id))


if __name__ == "__main__":
    unittest.main()
