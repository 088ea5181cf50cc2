"""HTTP-level tests: registration, cookie login, gated balance/ledger routes."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from kodbank.core.config import Settings, get_settings
from kodbank.core.database import SessionLocal
from kodbank.core.security import create_access_token
from kodbank.main import app
from kodbank.models import LedgerEntry, Role, User, UserToken
from kodbank.services.accounts import register_account
from kodbank.services.credentials import DUPLICATE_IDENTITY_MESSAGE, CredentialStore
from kodbank.services.ledger import BALANCE_VIEW_DESCRIPTION, LedgerRecorder
from tests.support import ApiTestCase


def count_rows(model) -> int:
    db = SessionLocal()
    try:
        return db.query(model).count()
    finally:
        db.close()


class TestAliceScenario(ApiTestCase):
    """Register, log in, check the balance with and without the session cookie."""

    def test_full_flow(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 201)
        self.assertIn("userId", resp.json())

        resp = self.login()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "alice")
        self.assertEqual(resp.json()["role"], "Customer")
        set_cookie = resp.headers["set-cookie"].lower()
        self.assertIn("token=", set_cookie)
        self.assertIn("httponly", set_cookie)
        self.assertIn("samesite=lax", set_cookie)

        resp = self.client.get("/api/bank/transactions")
        self.assertEqual(resp.status_code, 200)
        entries = resp.json()
        self.assertEqual(
            [(e["type"], e["amount"]) for e in entries],
            [("Credit", 1200.5), ("Debit", 500.0), ("Credit", 100000.0)],
        )

        resp = self.client.get("/api/bank/balance")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"balance": 100000})

        entries = self.client.get("/api/bank/transactions").json()
        self.assertEqual(len(entries), 4)
        self.assertEqual(entries[0]["type"], "Credit")
        self.assertEqual(entries[0]["amount"], 0)
        self.assertEqual(entries[0]["description"], BALANCE_VIEW_DESCRIPTION)
        self.assertEqual(entries[0]["status"], "Completed")

        self.client.cookies.clear()
        resp = self.client.get("/api/bank/balance")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(count_rows(LedgerEntry), 4)


class TestRegistration(ApiTestCase):
    def test_duplicate_username_is_generic_conflict(self) -> None:
        self.assertEqual(self.register().status_code, 201)
        resp = self.register(email="second@x.com")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"], DUPLICATE_IDENTITY_MESSAGE)
        self.assertEqual(count_rows(User), 1)
        self.assertEqual(count_rows(LedgerEntry), 3)

    def test_duplicate_email_gives_same_message(self) -> None:
        self.register()
        resp = self.register(username="alice2")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"], DUPLICATE_IDENTITY_MESSAGE)

    def test_role_in_body_is_ignored(self) -> None:
        resp = self.client.post(
            "/api/auth/register",
            json={
                "username": "eve",
                "email": "eve@x.com",
                "password": "pw123",
                "role": "Admin",
            },
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(self.login("eve", "pw123").json()["role"], "Customer")

    def test_invalid_email_rejected(self) -> None:
        resp = self.register(email="not-an-email")
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(count_rows(User), 0)

    def test_blank_username_rejected(self) -> None:
        resp = self.register(username="     ")
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(count_rows(User), 0)

    def test_username_too_short_after_strip_rejected(self) -> None:
        resp = self.register(username="  a  ")
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(count_rows(User), 0)
        self.assertEqual(count_rows(LedgerEntry), 0)

    def test_identity_fields_stored_stripped(self) -> None:
        resp = self.register(username="  bob  ", email=" bob@x.com ", phone="   ")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(self.login("bob", "pw123").status_code, 200)
        profile = self.client.get("/api/bank/profile").json()
        self.assertEqual(profile["username"], "bob")
        self.assertEqual(profile["email"], "bob@x.com")
        self.assertIsNone(profile["phone"])

    def test_placeholder_config_fails_before_store(self) -> None:
        app.dependency_overrides[get_settings] = lambda: Settings(
            DATABASE_URL="postgresql://kodbank:CLICK_TO:REVEAL_PASSWORD@db:5432/kodbank"
        )
        resp = self.register()
        self.assertEqual(resp.status_code, 500)
        self.assertIn("Config Error", resp.json()["detail"])
        self.assertEqual(count_rows(User), 0)


class TestLogin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()

    def test_wrong_password_twice_then_success(self) -> None:
        first = self.login(password="nope")
        second = self.login(password="still-nope")
        third = self.login()
        self.assertEqual(first.status_code, 401)
        self.assertEqual(second.status_code, 401)
        self.assertEqual(first.json(), second.json())
        self.assertEqual(first.json()["detail"], "Invalid username or password")
        self.assertEqual(third.status_code, 200)

    def test_unknown_user_matches_wrong_password(self) -> None:
        unknown = self.login(username="mallory")
        wrong = self.login(password="nope")
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(unknown.json(), wrong.json())
        self.assertNotIn("set-cookie", unknown.headers)

    def test_each_login_writes_audit_record(self) -> None:
        self.login()
        self.login()
        self.assertEqual(count_rows(UserToken), 2)


class TestRequestGate(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()

    def test_expired_cookie_rejected_without_side_effects(self) -> None:
        issued_at = datetime.now(UTC) - timedelta(hours=2)
        token, _ = create_access_token("alice", Role.CUSTOMER.value, issued_at=issued_at)
        self.client.cookies.set("token", token)
        resp = self.client.get("/api/bank/balance")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Unauthorized: Invalid or expired token")
        self.assertEqual(count_rows(LedgerEntry), 3)

    def test_forged_cookie_rejected(self) -> None:
        self.client.cookies.set("token", "eyJhbGciOiJIUzI1NiJ9.e30.invalid")
        self.assertEqual(self.client.get("/api/bank/transactions").status_code, 401)

    def test_missing_cookie(self) -> None:
        resp = self.client.get("/api/bank/profile")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Unauthorized: No token provided")

    def test_token_without_backing_user(self) -> None:
        token, _ = create_access_token("ghost", Role.CUSTOMER.value)
        self.client.cookies.set("token", token)
        self.assertEqual(self.client.get("/api/bank/transactions").json(), [])
        self.assertEqual(self.client.get("/api/bank/balance").status_code, 404)
        self.assertEqual(self.client.get("/api/bank/profile").status_code, 404)


class TestAccountRoutes(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.login()

    def test_profile_has_no_balance(self) -> None:
        resp = self.client.get("/api/bank/profile")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["email"], "alice@x.com")
        self.assertEqual(body["phone"], "555-1111")
        self.assertEqual(body["transaction_count"], 3)
        self.assertNotIn("balance", body)

    def test_transactions_limit(self) -> None:
        resp = self.client.get("/api/bank/transactions", params={"limit": 2})
        self.assertEqual(len(resp.json()), 2)

    def test_change_password(self) -> None:
        resp = self.client.post(
            "/api/auth/change-password",
            json={"currentPassword": "pw123", "newPassword": "rotated-pw"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.login(password="pw123").status_code, 401)
        self.assertEqual(self.login(password="rotated-pw").status_code, 200)

    def test_change_password_wrong_current(self) -> None:
        resp = self.client.post(
            "/api/auth/change-password",
            json={"currentPassword": "nope", "newPassword": "rotated-pw"},
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(self.login(password="pw123").status_code, 200)

    def test_logout_clears_cookie(self) -> None:
        resp = self.client.post("/api/auth/logout")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("max-age=0", resp.headers["set-cookie"].lower())


class TestStoreFailures(ApiTestCase):
    """Database errors behind a valid session surface as a logged, generic 500."""

    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.login()

    def test_transactions_store_failure(self) -> None:
        with patch.object(
            LedgerRecorder, "list_recent", side_effect=OperationalError("SELECT", {}, None)
        ), self.assertLogs("kodbank.api.bank", level="ERROR"):
            resp = self.client.get("/api/bank/transactions")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["detail"], "Could not load transactions")

    def test_profile_store_failure(self) -> None:
        with patch.object(
            CredentialStore, "get_profile", side_effect=SQLAlchemyError("connection lost")
        ), self.assertLogs("kodbank.api.bank", level="ERROR"):
            resp = self.client.get("/api/bank/profile")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["detail"], "Could not load profile")

    def test_balance_lookup_failure_leaves_ledger_untouched(self) -> None:
        with patch.object(
            CredentialStore, "find_by_username", side_effect=SQLAlchemyError("connection lost")
        ), self.assertLogs("kodbank.api.bank", level="ERROR"):
            resp = self.client.get("/api/bank/balance")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["detail"], "Balance check failed")
        self.assertEqual(count_rows(LedgerEntry), 3)

    def test_change_password_lookup_failure(self) -> None:
        with patch.object(
            CredentialStore, "find_by_username", side_effect=SQLAlchemyError("connection lost")
        ), self.assertLogs("kodbank.api.auth", level="ERROR"):
            resp = self.client.post(
                "/api/auth/change-password",
                json={"currentPassword": "pw123", "newPassword": "rotated-pw"},
            )
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["detail"], "Password update failed")
        self.assertEqual(self.login(password="pw123").status_code, 200)


class TestAdminRoutes(ApiTestCase):
    def test_customer_forbidden(self) -> None:
        self.register()
        self.login()
        self.assertEqual(self.client.get("/api/admin/users").status_code, 403)

    def test_manager_lists_users_without_balances(self) -> None:
        self.register()
        db = SessionLocal()
        try:
            register_account(db, "boss", "boss@x.com", "pw123", None, role=Role.MANAGER)
        finally:
            db.close()
        self.login("boss", "pw123")
        resp = self.client.get("/api/admin/users")
        self.assertEqual(resp.status_code, 200)
        users = resp.json()["users"]
        self.assertEqual([u["username"] for u in users], ["alice", "boss"])
        self.assertNotIn("balance", users[0])


class TestHealth(ApiTestCase):
    def test_health_reports_database(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertTrue(body["configured"])

    def test_placeholder_config_reports_degraded(self) -> None:
        app.dependency_overrides[get_settings] = lambda: Settings(
            DATABASE_URL="postgresql://kodbank:CLICK_TO:REVEAL_PASSWORD@db:5432/kodbank"
        )
        body = self.client.get("/api/health").json()
        self.assertEqual(body["status"], "degraded")
        self.assertEqual(body["database"], "connected")
        self.assertFalse(body["configured"])

    def test_unreachable_database_reports_degraded(self) -> None:
        with patch("kodbank.api.health.check_db_connected", return_value=False):
            body = self.client.get("/api/health").json()
        self.assertEqual(body["status"], "degraded")
        self.assertEqual(body["database"], "disconnected")


if __name__ == "__main__":
    unittest.main()
