"""
Unit Tests: SecretMaskingFilter

Run with:
    pytest tests/utils/unit/test_logging_config.py -v
"""

import logging

import pytest

from utils.logging_config import SecretMaskingFilter


def _record(msg, *args):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args or None, None)


@pytest.fixture
def masking_filter():
    return SecretMaskingFilter()


def test_masks_password_hash(masking_filter):
    record = _record("stored $2b$12$abcdefghijklmnopqrstuvABCDEFGHIJKLMNOPQRSTUVWXYZ0123 for user")

    assert masking_filter.filter(record) is True
    assert "$2b$" not in record.msg
    assert "[REDACTED_PASSWORD_HASH]" in record.msg


def test_masks_password_assignment(masking_filter):
    record = _record("login failed password=hunter2")

    masking_filter.filter(record)

    assert "hunter2" not in record.msg
    assert "[REDACTED_PASSWORD]" in record.msg


def test_masks_database_url_credentials(masking_filter):
    record = _record("connecting to postgresql+asyncpg://shop:s3cret@db:5432/marketplace")

    masking_filter.filter(record)

    assert "s3cret" not in record.msg
    assert "[REDACTED_DB_PASS]" in record.msg


def test_masks_email_in_args(masking_filter):
    record = _record("User %s registered", "alice@example.com")

    masking_filter.filter(record)

    assert record.args == ("[REDACTED_EMAIL]",)
    assert record.getMessage() == "User [REDACTED_EMAIL] registered"


def test_leaves_plain_messages_alone(masking_filter):
    record = _record("Cart line 7: user 2 product 10 +1 -> 4")

    masking_filter.filter(record)

    assert record.msg == "Cart line 7: user 2 product 10 +1 -> 4"
