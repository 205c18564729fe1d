# tests/test_route_guard.py
import unittest

from fastapi_users.jwt import generate_jwt

from gameledger.core.auth import JWT_AUDIENCE
from gameledger.core.config import settings
from gameledger.core.route_guard import HOME_PATH, LOGIN_PATH, has_valid_session, is_skipped, resolve_redirect

PROTECTED = ["/dashboard", "/transactions", "/profile"]
AUTH = ["/login", "/signup"]


def token(lifetime_seconds=3600, secret=None, audience=JWT_AUDIENCE):
    payload = {"sub": "00000000-0000-0000-0000-000000000001", "aud": audience}
    return generate_jwt(payload, secret or settings.SECRET_KEY, lifetime_seconds, algorithm=settings.ALGORITHM)


class TestResolveRedirect(unittest.TestCase):
    def redirect(self, path, has_session):
        return resolve_redirect(path, has_session, protected_paths=PROTECTED, auth_paths=AUTH)

    def test_protected_page_without_session_goes_to_login(self):
        self.assertEqual(self.redirect("/dashboard", False), LOGIN_PATH)
        self.assertEqual(self.redirect("/transactions/123", False), LOGIN_PATH)

    def test_protected_page_with_session_passes(self):
        self.assertIsNone(self.redirect("/dashboard", True))

    def test_auth_page_with_session_goes_home(self):
        self.assertEqual(self.redirect("/login", True), HOME_PATH)
        self.assertEqual(self.redirect("/signup", True), HOME_PATH)

    def test_auth_page_without_session_passes(self):
        self.assertIsNone(self.redirect("/login", False))

    def test_prefix_must_match_a_whole_segment(self):
        self.assertIsNone(self.redirect("/dashboards", False))
        self.assertIsNone(self.redirect("/profiles/me", False))

    def test_api_and_static_paths_are_never_redirected(self):
        self.assertIsNone(self.redirect("/api/v1/profile/me", False))
        self.assertIsNone(self.redirect("/dashboard/logo.png", False))
        self.assertTrue(is_skipped("/_next/static/chunk.js"))
        self.assertTrue(is_skipped("/media/avatars/a.png", "/media"))


class TestSessionToken(unittest.TestCase):
    def test_valid_token(self):
        self.assertTrue(has_valid_session(token()))

    def test_missing_token(self):
        self.assertFalse(has_valid_session(None))
        self.assertFalse(has_valid_session(""))

    def test_expired_token(self):
        self.assertFalse(has_valid_session(token(lifetime_seconds=-10)))

    def test_wrong_secret(self):
        self.assertFalse(has_valid_session(token(secret="another-secret-key-that-is-long-enough")))

    def test_wrong_audience(self):
        self.assertFalse(has_valid_session(token(audience=["somebody-else"])))

    def test_garbage(self):
        self.assertFalse(has_valid_session("not-a-jwt"))


if __name__ == "__main__":
    unittest.main()
