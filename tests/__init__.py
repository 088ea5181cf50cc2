"""Test package. Points the app at an in-memory SQLite database before anything imports settings."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "dev"
os.environ["JWT_SECRET"] = "test-secret-for-unit-tests"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
