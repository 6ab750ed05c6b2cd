"""Error taxonomy shared by services and HTTP handlers.

Every error carries the HTTP status it maps to and optional extra fields that
are merged into the ``{"error": ...}`` response body.
"""

from __future__ import annotations

from typing import Any


class BudgetError(Exception):
    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class RequestError(BudgetError):
    status_code = 400


class ForbiddenError(BudgetError):
    status_code = 403


class NotFoundError(BudgetError):
    status_code = 404


class ParseError(BudgetError):
    """Transaction text did not match the recognized grammar."""

    status_code = 400


class UnknownCurrencyError(BudgetError):
    status_code = 400

    def __init__(self, code: str) -> None:
        super().__init__(f"Unknown currency: {code}", currency=code)
        self.code = code


class ConversionError(BudgetError):
    """Exchange rate is missing or unusable, nothing may be persisted."""

    status_code = 500


class ConfigurationError(BudgetError):
    status_code = 500


class LLMError(BudgetError):
    status_code = 502
