import os

"""Test configuration to set environment variables for the pytest suite.
This ensures required settings are present before importing modules
that depend on them."""

# Flag application is running in test mode
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")

# In-memory database; tests that need several connections build their own file-backed engine
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")

# Keep conflict retries fast
os.environ.setdefault("CART_CONFLICT_RETRY_DELAY", "0")

os.environ.setdefault("LOG_LEVEL", "DEBUG")
