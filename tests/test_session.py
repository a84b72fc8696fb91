import unittest

from db import crud, kv
from db.models import AuthToken
from shop.backend import ShopBackend
from shop.errors import AdminRequired
from store_case import ADMIN, CUSTOMER, StoreTestCase

DAY = 24 * 3600


class SessionTestCase(StoreTestCase):
    # ---------- login / logout ----------

    async def test_login_returns_user_and_token(self):
        resp = await self.login_customer()
        self.assertEqual(resp.message, "Login successful")
        self.assertEqual(resp.data["user"].email, "user@test.com")
        self.assertEqual(resp.data["user"].role, "customer")
        self.assertTrue(resp.data["token"].startswith("tok_2_"))

        _, auth = await crud.load_session()
        self.assertEqual(auth.user_id, "2")
        self.assertEqual(auth.expires_at, self.now + DAY)

    async def test_login_rejects_bad_credentials(self):
        for email, pwd in [
            ("user@test.com", "wrong"),
            ("nobody@test.com", "user123"),
            ("admin@test.com", "user123"),
        ]:
            with self.subTest(email=email, pwd=pwd):
                resp = await self.backend.login(email, pwd)
                self.assertFalse(resp.success)
                self.assertEqual(resp.error, "Invalid credentials")
        self.assertFalse(await self.backend.is_authenticated())

    async def test_logout_always_succeeds(self):
        resp = await self.backend.logout()
        self.assertTrue(resp.success)

        await self.login_customer()
        self.assertTrue(await self.backend.is_authenticated())
        resp = await self.backend.logout()
        self.assertTrue(resp.success)
        self.assertEqual(resp.message, "Logout successful")

        resp = await self.backend.get_current_user()
        self.assertEqual(resp.error, "Authentication required")

    async def test_new_login_replaces_current_session(self):
        await self.login_customer()
        await self.login_admin()
        resp = await self.backend.get_current_user()
        self.assertEqual(resp.data.email, ADMIN[0])

    # ---------- current user ----------

    async def test_get_current_user_without_session(self):
        resp = await self.backend.get_current_user()
        self.assertFalse(resp.success)
        self.assertEqual(resp.error, "Authentication required")

    async def test_get_current_user(self):
        await self.login_customer()
        resp = await self.backend.get_current_user()
        self.assertTrue(resp.success)
        self.assertEqual(resp.data.id, "2")
        self.assertEqual(resp.data.name, "Test Customer")

    async def test_user_removed_after_login(self):
        await self.login_customer()
        users = await kv.get(crud.USERS_KEY)
        await kv.set(crud.USERS_KEY, [u for u in users if u["id"] != "2"])

        resp = await self.backend.get_current_user()
        self.assertEqual(resp.error, "User not found")

    async def test_session_survives_backend_restart(self):
        await self.login_customer()
        other = ShopBackend(clock=lambda: self.now, simulate_delay=False)
        resp = await other.get_current_user()
        self.assertTrue(resp.success)
        self.assertEqual(resp.data.email, CUSTOMER[0])

    # ---------- expiry ----------

    async def test_session_valid_until_expiry(self):
        await self.login_customer()
        self.now += DAY - 1
        self.assertTrue((await self.backend.get_current_user()).success)

    async def test_expired_session_is_cleared_on_use(self):
        await self.login_customer()
        self.now += DAY  # expiry is inclusive

        resp = await self.backend.get_current_user()
        self.assertFalse(resp.success)
        self.assertEqual(resp.error, "Session expired")

        resp = await self.backend.get_current_user()
        self.assertEqual(resp.error, "Authentication required")
        self.assertEqual(await crud.load_session(), (None, None))

    async def test_session_stored_with_past_expiry(self):
        await crud.save_session(
            "tok_2_0_abc",
            AuthToken(user_id="2", email="user@test.com", role="customer",
                      expires_at=self.now - 1),
        )
        self.assertFalse(await self.backend.is_authenticated())

        resp = await self.backend.add_to_cart("1", 1)
        self.assertEqual(resp.error, "Session expired")
        resp = await self.backend.add_to_cart("1", 1)
        self.assertEqual(resp.error, "Authentication required")

    async def test_missing_token_means_no_session(self):
        await self.login_customer()
        await kv.delete(crud.SESSION_TOKEN_KEY)
        resp = await self.backend.get_cart()
        self.assertEqual(resp.error, "Authentication required")

    # ---------- admin gate ----------

    async def test_require_auth_admin_gate(self):
        await self.login_customer()
        with self.assertRaises(AdminRequired):
            await self.backend.sessions.require_auth(needs_admin=True)
        auth = await self.backend.sessions.require_auth()
        self.assertEqual(auth.role, "customer")

        await self.login_admin()
        auth = await self.backend.sessions.require_auth(needs_admin=True)
        self.assertEqual(auth.role, "admin")


if __name__ == "__main__":
    unittest.main()
