import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test runs to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _config_error(name: str, reason: Exception | str, expected: str) -> None:
    print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
    print(f"Reason: {reason}", file=sys.stderr)
    print(f"Expected: {expected}", file=sys.stderr)
    print(f"Current value: {os.environ.get(name, '(not set)')}\n", file=sys.stderr)
    sys.exit(1)


def _positive_int(name: str, default: int) -> int:
    try:
        value = int(os.environ.get(name, default))
        if value <= 0:
            raise ValueError(f"{name} must be positive (got: {value})")
        return value
    except ValueError as e:
        _config_error(name, e, "Positive integer")


def _non_negative_float(name: str, default: float) -> float:
    try:
        value = float(os.environ.get(name, default))
        if value < 0:
            raise ValueError(f"{name} must not be negative (got: {value})")
        return value
    except ValueError as e:
        _config_error(name, e, "Non-negative number (e.g. 0.05)")


# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str.upper())
except ValueError as e:
    _config_error("RUNTIME_ENVIRONMENT", e, ", ".join(env.value for env in RuntimeEnvironment))

# Storage
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/marketplace.db")
DB_ECHO = os.environ.get("DB_ECHO", "false") == "true"
# Seconds SQLite waits on a locked database before reporting it busy
DB_BUSY_TIMEOUT = _positive_int("DB_BUSY_TIMEOUT", 5)
TRANSACTION_TIMEOUT = _positive_int("TRANSACTION_TIMEOUT", 30)

# Catalog
PRODUCT_LIST_LIMIT = _positive_int("PRODUCT_LIST_LIMIT", 50)

# Cart
CART_CONFLICT_MAX_RETRIES = _positive_int("CART_CONFLICT_MAX_RETRIES", 3)
CART_CONFLICT_RETRY_DELAY = _non_negative_float("CART_CONFLICT_RETRY_DELAY", 0.05)

# Logging (environment-specific retention defaults)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG" if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV else "INFO")
LOG_RETENTION_DAYS = _positive_int(
    "LOG_RETENTION_DAYS", 30 if RUNTIME_ENVIRONMENT == RuntimeEnvironment.PROD else 7
)
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"
LOG_DIR = os.environ.get("LOG_DIR", "logs")
