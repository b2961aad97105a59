"""Exception types for loadstate."""

from __future__ import annotations


class LoadStateError(Exception):
    """Base exception for loadstate."""


class OperationFailed(LoadStateError):
    """Raised by an operation to fail its receiver with an explicit message."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(LoadStateError):
    """Raised when settings or constructor arguments are invalid."""


def resolve_error_message(message: str | None, default: str) -> str:
    """Fall back to ``default`` when no message, or an empty one, was provided."""
    if message is None or len(message) == 0:
        return default
    return message


def message_of(exc: BaseException) -> str:
    if isinstance(exc, OperationFailed):
        return exc.message
    return str(exc)
