"""
Typed results for engine operations.

Expected failures (bad role, missing rows, invalid values, duplicate
submissions) travel back to the caller as a ``Result`` instead of an
exception, so routers and edit commands can decide what to do with them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    UPSTREAM_FAILURE = "upstream_failure"


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=Failure(kind=kind, message=message))


def unauthorized(message: str = "Not authorized") -> Result:
    return Result.fail(ErrorKind.UNAUTHORIZED, message)


def not_found(message: str) -> Result:
    return Result.fail(ErrorKind.NOT_FOUND, message)


def invalid_input(message: str) -> Result:
    return Result.fail(ErrorKind.INVALID_INPUT, message)


def conflict(message: str) -> Result:
    return Result.fail(ErrorKind.CONFLICT, message)
