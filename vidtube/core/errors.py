"""Tagged result type returned by service operations.

Services never raise for expected failures (bad input, duplicates, bad
credentials, bad tokens). They return ``Ok(value)`` or ``Err(kind, message)``
and the route layer decides which HTTP status each kind maps to.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories shared by every service operation."""

    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    UNAUTHENTICATED = "unauthenticated"
    TOKEN_INVALID = "token_invalid"
    FATAL = "fatal"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    code: str | None = None

    @property
    def error_code(self) -> str:
        """Machine-readable code; falls back to the kind when no finer code was given."""
        return self.code or self.kind.value


Result = Union[Ok[T], Err]


class InvalidInputError(ValueError):
    """Raised by pure helpers (e.g. password hashing) on unusable input."""
