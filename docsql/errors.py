"""Custom exception hierarchy for docsql.

All public errors inherit from DocSQLError so callers can catch the base
class for any docsql-specific failure.  Every error is raised synchronously
to the immediate caller; nothing is retried and no partial statement is
ever returned.
"""
from __future__ import annotations

from typing import Any


class DocSQLError(Exception):
    """Base exception for all docsql errors."""

    code = "DOCSQL_ERROR"

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response for API-style reporting."""
        return {"error": self.code, "message": str(self)}


class TranslationError(DocSQLError):
    """Raised when a filter tree or pipeline cannot be translated.

    Args:
        message: Human-readable description.
        context: The translation path at which the failure happened
            (e.g. ``"SELECT->$or[1]"``).  Used for diagnostics only.
    """

    code = "TRANSLATION_ERROR"

    def __init__(self, message: str, context: str | None = None) -> None:
        super().__init__(f"{message} | Context: {context}" if context else message)
        self.message = message
        self.context = context

    def to_error_response(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "context": self.context,
        }


class UnsupportedOperatorError(TranslationError):
    """Raised when an operator has neither a plugin nor a built-in mapping."""

    code = "UNSUPPORTED_OPERATOR"

    def __init__(self, field: str, operator: str, context: str | None = None) -> None:
        if field:
            message = f'Unsupported operator "{operator}" for field "{field}"'
        else:
            message = f'Unsupported operator "{operator}"'
        super().__init__(message, context=context)
        self.field = field
        self.operator = operator

    def to_error_response(self) -> dict[str, Any]:
        response = super().to_error_response()
        response["details"] = {"field": self.field, "operator": self.operator}
        return response


class SQLGenerationError(TranslationError):
    """Raised when a well-formed input asks for SQL the engine cannot emit.

    Unsupported aggregate functions, unknown update operators and empty
    update payloads all end up here.
    """

    code = "SQL_GENERATION_ERROR"


class SafetyViolationError(DocSQLError):
    """Raised when a statement would be unsafe to execute.

    UPDATE and DELETE without a filter would touch every row of the table;
    INSERT without documents has nothing to write.

    Args:
        message: Human-readable description.
        statement: The statement kind that was refused (``"UPDATE"`` …).
    """

    code = "SAFETY_VIOLATION"

    def __init__(self, message: str, statement: str | None = None) -> None:
        super().__init__(message)
        self.statement = statement

    def to_error_response(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": str(self),
            "details": {"statement": self.statement},
        }


class ConfigurationError(DocSQLError):
    """Raised when a builder is used with malformed input.

    Args:
        message: Human-readable description.
        builder: Name of the builder that rejected its input.
    """

    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, builder: str | None = None) -> None:
        super().__init__(message)
        self.builder = builder

    def to_error_response(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": str(self),
            "details": {"builder": self.builder},
        }
