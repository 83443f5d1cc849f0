"""
Name: JSON Logger Tests

Responsibilities:
  - Validate JSON formatting, secret redaction and set serialization
"""

import json
import logging
import sys

import pytest

from identity_model.crosscutting.logger import JSONFormatter

pytestmark = pytest.mark.unit


def _format(**extra) -> dict:
    record = logging.LogRecord(
        name="identity-model",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello %s",
        args=("world",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(JSONFormatter().format(record))


def test_basic_payload():
    payload = _format()

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "identity-model"


@pytest.mark.parametrize(
    "key", ["password", "password_hash", "remember_token", "database_url"]
)
def test_sensitive_keys_are_redacted(key):
    assert _format(**{key: "s3cret"})[key] == "***REDACTADO***"


def test_nested_sensitive_keys_are_redacted():
    payload = _format(user={"email": "a@example.com", "password_hash": "x"})

    assert payload["user"] == {"email": "a@example.com", "password_hash": "***REDACTADO***"}


def test_sets_become_sorted_lists():
    assert _format(roles=frozenset({"member", "admin"}))["roles"] == ["admin", "member"]


def test_non_serializable_values_become_strings():
    assert _format(obj=object())["obj"].startswith("<object object")


def test_exception_info_is_included():
    formatter = JSONFormatter()
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.LogRecord(
            "identity-model", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )

    payload = json.loads(formatter.format(record))

    assert payload["exception"]["type"] == "ValueError"
    assert payload["exception"]["message"] == "bad"
