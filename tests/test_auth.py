"""Sign-in, sign-out and bearer-token checks."""

import unittest

from seva.identity.domain import AuthSession, AuthUser
from tests.support import TEST_EMAIL, TEST_PASSWORD, TEST_TOKEN, TEST_UID, ApiTestCase


class AuthTestCase(ApiTestCase):

    def test_login_returns_token(self):
        body = self.assertStatus(
            self.client.post("/auth/login", json={"email": f"  {TEST_EMAIL} ", "password": TEST_PASSWORD}), 200
        )
        self.assertEqual(body["uid"], TEST_UID)
        self.assertEqual(body["id_token"], TEST_TOKEN)

    def test_wrong_password_and_unknown_user_look_the_same(self):
        for email, password in ((TEST_EMAIL, "nope"), ("ghost@seva.test", TEST_PASSWORD)):
            body = self.assertStatus(
                self.client.post("/auth/login", json={"email": email, "password": password}), 401
            )
            self.assertEqual(body["detail"], "Invalid email or password.")
            self.assertNotIn("context", body)

    def test_admin_routes_need_a_token(self):
        self.assertStatus(self.client.get("/auth/me"), 401)
        self.assertStatus(self.client.get("/staff"), 401)
        self.assertStatus(
            self.client.get("/staff", headers={"Authorization": "Bearer stale"}), 401
        )

    def test_me_and_logout(self):
        body = self.assertStatus(self.get("/auth/me"), 200)
        self.assertEqual(body["email"], TEST_EMAIL)
        self.assertIsNone(body["id_token"])
        self.assertEqual(self.assertStatus(self.post("/auth/logout"), 200)["message"], "Signed out")

    def test_reset_password(self):
        self.assertStatus(self.client.post("/auth/reset-password", json={"email": "field@seva.test"}), 200)
        self.assertEqual(self.identity.reset_requests, ["field@seva.test"])

    def test_public_routes(self):
        self.assertEqual(self.assertStatus(self.client.get("/"), 200)["service"], "Seva+")
        health = self.assertStatus(self.client.get("/health"), 200)
        self.assertEqual(health["checks"]["database"], "connected")
        self.assertEqual(health["status"], "healthy")


class AuthSessionTestCase(unittest.TestCase):

    def setUp(self):
        self.user = AuthUser(uid=TEST_UID, email=TEST_EMAIL, id_token=TEST_TOKEN)

    def test_listener_is_called_with_current_state(self):
        seen = []
        session = AuthSession()
        session.on_auth_state_changed(seen.append)
        self.assertEqual(seen, [None])
        self.assertFalse(session.is_authenticated)

    def test_sign_in_and_out_notify(self):
        seen = []
        session = AuthSession()
        unsubscribe = session.on_auth_state_changed(seen.append)
        session.set_user(self.user)
        self.assertTrue(session.is_authenticated)
        session.clear()
        session.clear()
        self.assertEqual(seen, [None, self.user, None])

        unsubscribe()
        session.set_user(self.user)
        self.assertEqual(len(seen), 3)
        self.assertEqual(session.current_user(), self.user)


if __name__ == "__main__":
    unittest.main()
