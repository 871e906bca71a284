"""Custom exceptions for the queue alarm reconciler.

Remote-call failures never surface as exceptions; they are converted into
counted outcomes by the reconciler. These types cover the local failure
modes: bad configuration and unreadable plan files.
"""

from __future__ import annotations

from typing import Any


class ReconcilerError(Exception):
    """Base exception for all reconciler errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ConfigurationError(ReconcilerError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


class PlanFormatError(ReconcilerError, ValueError):
    """Raised when a plan file cannot be parsed."""

    def __init__(self, message: str, line_number: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.line_number = line_number
        if line_number is not None:
            self.details["line_number"] = line_number
