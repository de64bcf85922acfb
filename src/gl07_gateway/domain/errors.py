"""Domain exceptions.

File access failures are reported with the builtin ``OSError`` family.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .unit4 import BatchResponse


class GatewayError(Exception):
    """Base class for all gateway errors."""


class MalformedInputError(GatewayError):
    """Input text is empty or does not parse into an ABWTransaction."""

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> None:
        self.line = line
        self.column = column
        if line is not None:
            position = f"line {line}" if column is None else f"line {line}, column {column}"
            message = f"{message} ({position})"
        super().__init__(message)


class UnsupportedTransformerError(GatewayError):
    """No transformer is registered for a source system's transformer type."""


class ConfigurationError(GatewayError):
    """Required settings are missing or invalid."""


class AuthenticationError(GatewayError):
    """The token endpoint rejected the credentials."""


class SubmissionError(GatewayError):
    """Unit4 did not accept a batch."""

    def __init__(self, message: str, response: "BatchResponse | None" = None) -> None:
        super().__init__(message)
        self.response = response


class OperationCancelled(GatewayError):
    """The run was cancelled."""
