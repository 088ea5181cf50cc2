"""Shared fixtures: fresh schema per test and a TestClient bound to it."""

import unittest

from fastapi.testclient import TestClient

from kodbank.core.database import SessionLocal, engine
from kodbank.main import app
from kodbank.models import Base


def reset_schema() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


class DatabaseTestCase(unittest.TestCase):
    """Gives each test an empty schema and an open session (self.db)."""

    def setUp(self) -> None:
        reset_schema()
        self.db = SessionLocal()

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(bind=engine)


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus self.client (cookies persist across requests)."""

    def setUp(self) -> None:
        super().setUp()
        self.client = TestClient(app)
        self.addCleanup(app.dependency_overrides.clear)

    def register(
        self,
        username: str = "alice",
        email: str = "alice@x.com",
        password: str = "pw123",
        phone: str | None = "555-1111",
    ):
        return self.client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password, "phone": phone},
        )

    def login(self, username: str = "alice", password: str = "pw123"):
        return self.client.post(
            "/api/auth/login",
            json={"username": username, "password": password},
        )
