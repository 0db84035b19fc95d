"""
Error kinds and the Result type returned by node lifecycle operations.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ComputeError(Exception):
    """Base class for all adapter errors."""


class ValidationError(ComputeError):
    """Template or identifier is missing a required field."""


class UnsupportedCapability(ComputeError):
    """Operation is not supported by Compute Engine."""


class OperationError(ComputeError):
    """A zone operation did not complete successfully."""

    def __init__(self, message: str, operation=None):
        super().__init__(message)
        self.operation = operation


class OperationTimeout(OperationError):
    """Polling exceeded the configured timeout before reaching DONE."""


class OperationFailed(OperationError):
    """Operation reached DONE with an attached error."""

    def __init__(self, code, message: Optional[str], operation=None):
        super().__init__(
            f"operation failed. Http Error Code: {code} HttpError: {message}",
            operation=operation,
        )
        self.code = code
        self.error_message = message


@dataclass
class Result(Generic[T]):
    """Outcome of a lifecycle operation: a value or an error, never both."""

    value: Optional[T] = None
    error: Optional[ComputeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ComputeError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """
        Return the value, raising the error if there is one.

        Returns:
            The wrapped value

        Raises:
            ComputeError: The wrapped error
        """
        if self.error is not None:
            raise self.error
        return self.value
