"""HTTP tests through the real FastAPI app with an isolated in-memory database."""

import unittest
from collections.abc import Generator
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from storeauth.api.deps import get_account_service
from storeauth.core.database import get_db
from storeauth.main import app, settings as app_settings
from storeauth.models import Role
from storeauth.repositories import SqlAccountStore
from storeauth.services.accounts import AccountService
from tests.support import make_sessionmaker

API = "/api"


class ApiTestCase(unittest.TestCase):
    """Each test gets a fresh database wired in through a get_db override."""

    def setUp(self) -> None:
        self.session_factory = make_sessionmaker()

        def override_get_db() -> Generator[Session, None, None]:
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self.admin_token = self.create_and_login("root", "root@x.com", "rootpass", Role.ADMIN)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.session_factory.kw["bind"].dispose()

    def create_and_login(self, username: str, email: str, password: str, role: Role) -> str:
        db = self.session_factory()
        try:
            AccountService(SqlAccountStore(db)).register(
                name=username, email=email, username=username, password=password, role=role
            )
        finally:
            db.close()
        resp = self.client.post(f"{API}/auth/login", json={"username": username, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["token"]

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


class TestEndToEndScenario(ApiTestCase):
    """Register, log in, hit guarded endpoints, get deleted, restore, change password."""

    def test_alice_lifecycle(self) -> None:
        resp = self.client.post(
            f"{API}/auth/register",
            json={"name": "Alice", "username": "alice", "email": "a@x.com", "password": "secret123"},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["role"], "staff")
        self.assertNotIn("password", body["data"])
        self.assertNotIn("password_hash", body["data"])
        self.assertNotIn("secret123", resp.text)
        alice_id = body["data"]["id"]

        resp = self.client.post(f"{API}/auth/login", json={"username": "alice", "password": "secret123"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["token_type"], "bearer")
        self.assertNotIn("password_hash", resp.json()["data"])
        token = resp.json()["token"]

        # Staff-level endpoint
        resp = self.client.get(f"{API}/users/me", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["username"], "alice")

        # Admin-only endpoint
        resp = self.client.get(f"{API}/users", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(
            resp.json(),
            {"success": False, "message": "Unauthorized - Insufficient permissions", "code": "forbidden"},
        )

        resp = self.client.delete(f"{API}/users/{alice_id}", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "User deleted successfully")

        resp = self.client.get(f"{API}/users/me", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers.get("www-authenticate"), "Bearer")

        resp = self.client.patch(f"{API}/users/{alice_id}/restore", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["data"]["is_deleted"])

        resp = self.client.patch(
            f"{API}/users/change-password",
            headers=self.bearer(token),
            json={"currentPassword": "wrong-one", "newPassword": "newsecret", "confirmNewPassword": "newsecret"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Current password is incorrect")
        self.assertEqual(resp.json()["code"], "invalid_credentials")

        resp = self.client.patch(
            f"{API}/users/change-password",
            headers=self.bearer(token),
            json={"currentPassword": "secret123", "newPassword": "newsecret", "confirmNewPassword": "different"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "New password and confirmation do not match")
        self.assertEqual(resp.json()["code"], "invalid_input")

        resp = self.client.patch(
            f"{API}/users/change-password",
            headers=self.bearer(token),
            json={"currentPassword": "secret123", "newPassword": "newsecret", "confirmNewPassword": "newsecret"},
        )
        self.assertEqual(resp.status_code, 200)
        resp = self.client.post(f"{API}/auth/login", json={"username": "a@x.com", "password": "newsecret"})
        self.assertEqual(resp.status_code, 200)


class TestAuthEndpoints(ApiTestCase):
    def test_register_conflict(self) -> None:
        payload = {"name": "Root", "username": "root2", "email": "ROOT@x.com", "password": "secret123"}
        resp = self.client.post(f"{API}/auth/register", json=payload)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "User with this email or username already exists")

    def test_register_missing_field_is_400(self) -> None:
        resp = self.client.post(f"{API}/auth/register", json={"username": "x", "password": "secret123"})
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])

    def test_register_invalid_email(self) -> None:
        resp = self.client.post(
            f"{API}/auth/register",
            json={"name": "X", "username": "x", "email": "nope", "password": "secret123"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Please enter a valid email")

    def test_login_failures_indistinguishable(self) -> None:
        wrong_password = self.client.post(f"{API}/auth/login", json={"username": "root", "password": "nope"})
        unknown_user = self.client.post(f"{API}/auth/login", json={"username": "ghost", "password": "nope"})
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_user.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_user.json())


class TestUserAdministration(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.staff_token = self.create_and_login("bob", "bob@x.com", "bobpass1", Role.STAFF)
        self.bob_id = self.client.get(f"{API}/users/me", headers=self.bearer(self.staff_token)).json()["data"]["id"]

    def test_list_users(self) -> None:
        resp = self.client.get(f"{API}/users", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["count"], 2)
        self.assertEqual({u["username"] for u in body["data"]}, {"root", "bob"})
        for user in body["data"]:
            self.assertNotIn("password_hash", user)

    def test_get_user_and_not_found(self) -> None:
        resp = self.client.get(f"{API}/users/{self.bob_id}", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["email"], "bob@x.com")

        resp = self.client.get(f"{API}/users/99999", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "User not found")

    def test_change_role(self) -> None:
        url = f"{API}/users/{self.bob_id}/role"
        resp = self.client.patch(url, headers=self.bearer(self.admin_token), json={"role": "owner"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], 'Invalid role. Role must be either "admin" or "staff"')

        resp = self.client.patch(url, headers=self.bearer(self.admin_token), json={"role": "admin"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["role"], "admin")

        # Bob's old token now carries stale claims, but the live role is used.
        resp = self.client.get(f"{API}/users", headers=self.bearer(self.staff_token))
        self.assertEqual(resp.status_code, 200)

    def test_change_role_missing_target(self) -> None:
        resp = self.client.patch(
            f"{API}/users/4242/role", headers=self.bearer(self.admin_token), json={"role": "staff"}
        )
        self.assertEqual(resp.status_code, 404)

    def test_delete_and_restore_are_idempotent(self) -> None:
        for _ in range(2):
            resp = self.client.delete(f"{API}/users/{self.bob_id}", headers=self.bearer(self.admin_token))
            self.assertEqual(resp.status_code, 200)
        for _ in range(2):
            resp = self.client.patch(
                f"{API}/users/{self.bob_id}/restore", headers=self.bearer(self.admin_token)
            )
            self.assertEqual(resp.status_code, 200)

    def test_delete_missing_target(self) -> None:
        resp = self.client.delete(f"{API}/users/4242", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 404)

    def test_staff_cannot_administer(self) -> None:
        headers = self.bearer(self.staff_token)
        self.assertEqual(self.client.delete(f"{API}/users/{self.bob_id}", headers=headers).status_code, 403)
        self.assertEqual(
            self.client.patch(f"{API}/users/{self.bob_id}/role", headers=headers, json={"role": "admin"}).status_code,
            403,
        )

    def test_requests_without_valid_token(self) -> None:
        self.assertEqual(self.client.get(f"{API}/users").status_code, 401)
        self.assertEqual(self.client.get(f"{API}/users/me").status_code, 401)
        resp = self.client.get(f"{API}/users/me", headers={"Authorization": "Bearer not.a.token"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "Unauthorized - Invalid token")
        resp = self.client.get(f"{API}/users/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        self.assertEqual(resp.status_code, 401)

    def test_non_integer_id_is_400(self) -> None:
        resp = self.client.get(f"{API}/users/abc", headers=self.bearer(self.admin_token))
        self.assertEqual(resp.status_code, 400)


class TestErrorHandlingAndHealth(ApiTestCase):
    def test_health(self) -> None:
        resp = self.client.get(f"{API}/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok", "environment": "dev", "database": "connected"})

    def break_login(self) -> TestClient:
        class BrokenService:
            def login(self, identifier: str, password: str):
                raise RuntimeError("database went away")

        app.dependency_overrides[get_account_service] = lambda: BrokenService()
        return TestClient(app, raise_server_exceptions=False)

    def test_unexpected_error_is_500_envelope(self) -> None:
        client = self.break_login()
        resp = client.post(f"{API}/auth/login", json={"username": "root", "password": "rootpass"})
        self.assertEqual(resp.status_code, 500)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["message"], "Internal server error")
        self.assertEqual(body["code"], "unexpected")
        # APP_ENV=dev in tests, so the detail is exposed.
        self.assertIn("database went away", body["error"])

    def test_unexpected_error_detail_hidden_in_prod(self) -> None:
        client = self.break_login()
        with patch.object(app_settings, "APP_ENV", "prod"):
            resp = client.post(f"{API}/auth/login", json={"username": "root", "password": "rootpass"})
        self.assertEqual(resp.status_code, 500)
        self.assertNotIn("error", resp.json())
        self.assertNotIn("database went away", resp.text)

    def test_validation_error_never_echoes_password(self) -> None:
        payload = {"name": "A", "username": "alice", "password": "TopSecretPw1"}
        resp = self.client.post(f"{API}/auth/register", json=payload)
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["code"], "invalid_input")
        self.assertEqual(body["message"], "Invalid email: Field required")
        self.assertNotIn("TopSecretPw1", resp.text)
        for err in body["error"]:
            self.assertNotIn("input", err)
            self.assertNotIn("ctx", err)

    def test_validation_error_detail_hidden_in_prod(self) -> None:
        with patch.object(app_settings, "APP_ENV", "prod"):
            resp = self.client.post(f"{API}/auth/register", json={"username": "x", "password": "secret123"})
        self.assertEqual(resp.status_code, 400)
        self.assertNotIn("error", resp.json())
        self.assertEqual(resp.json()["code"], "invalid_input")

    def test_over_long_password_rejected_at_register(self) -> None:
        payload = {"name": "L", "username": "long", "email": "l@x.com", "password": "a" * 72 + "correct-suffix"}
        resp = self.client.post(f"{API}/auth/register", json=payload)
        self.assertEqual(resp.status_code, 400)
        self.assertNotIn("correct-suffix", resp.text)


if __name__ == "__main__":
    unittest.main()
