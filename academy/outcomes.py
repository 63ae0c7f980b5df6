"""
Simplified operation outcomes handed to the view layer.

Why:
    Services catch and log adapter failures and return one of a small set of
    statuses instead of raising. The view layer only decides which toast to
    show; it never needs to know about SQLSTATEs or driver exceptions.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from .config import DEFAULT_LOCALE
from .messages import translate


T = TypeVar("T")


class Status(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FAILURE = "failure"
    INVALID = "invalid"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    status: Status
    value: Optional[T] = None
    code: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCESS


def succeed(value: T = None, code: Optional[str] = None, *, locale: str = DEFAULT_LOCALE) -> OperationResult[T]:
    message = translate(code, locale) if code else None
    return OperationResult(Status.SUCCESS, value, code, message)


def fail(status: Status, code: str, *, locale: str = DEFAULT_LOCALE, value=None) -> OperationResult:
    return OperationResult(status, value, code, translate(code, locale))


__all__ = ["OperationResult", "Status", "fail", "succeed"]
