"""Test environment: fast bcrypt and a fixed signing key, set before any app import."""

import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-signing-key-not-for-production")
os.environ.setdefault("APP_ENV", "dev")
