"""Shared test setup: no rate limiting, no real providers."""

import os

os.environ["RATELIMIT_ENABLED"] = "False"
os.environ.setdefault("SECRET_KEY", "test-secret")
