"""Unit tests for the error hierarchy."""

from __future__ import annotations

import pytest

from docsql.errors import (
    ConfigurationError,
    DocSQLError,
    SafetyViolationError,
    SQLGenerationError,
    TranslationError,
    UnsupportedOperatorError,
)


@pytest.mark.parametrize(
    "error",
    [
        TranslationError("bad"),
        UnsupportedOperatorError("age", "$foo"),
        SQLGenerationError("bad"),
        SafetyViolationError("bad"),
        ConfigurationError("bad"),
    ],
)
def test_all_errors_share_base(error):
    assert isinstance(error, DocSQLError)
    assert error.to_error_response()["error"] == error.code


def test_translation_error_context_in_message():
    err = TranslationError("Invalid $in", "root->tags")
    assert str(err) == "Invalid $in | Context: root->tags"
    assert err.to_error_response() == {
        "error": "TRANSLATION_ERROR",
        "message": "Invalid $in",
        "context": "root->tags",
    }


def test_unsupported_operator_message():
    err = UnsupportedOperatorError("age", "$foo", "root->age")
    assert err.message == 'Unsupported operator "$foo" for field "age"'
    assert isinstance(err, TranslationError)


def test_generation_error_is_a_translation_error():
    assert issubclass(SQLGenerationError, TranslationError)


def test_builder_errors_carry_details():
    assert SafetyViolationError("x", "DELETE").to_error_response()["details"] == {
        "statement": "DELETE"
    }
    assert ConfigurationError("x", "INSERT").to_error_response()["details"] == {
        "builder": "INSERT"
    }
