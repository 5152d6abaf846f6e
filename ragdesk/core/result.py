"""
Result/Status primitive: tagged success-with-value or failure-with-message.

Responsibility: Every fallible step of the answer pipeline returns a Result
instead of raising, so the orchestrator can map each failure to a terminal
answer explicitly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class StatusCode(str, Enum):
    OK = "ok"
    ERROR = "error"


class Status(BaseModel):
    """Outcome code plus the original error message (kept for logging)."""

    model_config = ConfigDict(frozen=True)

    code: StatusCode = StatusCode.OK
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "Status":
        return cls(code=StatusCode.OK)

    @classmethod
    def error(cls, message: str) -> "Status":
        return cls(code=StatusCode.ERROR, error_message=message)

    @property
    def is_ok(self) -> bool:
        return self.code == StatusCode.OK


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None
    status: Status

    @property
    def is_success(self) -> bool:
        return self.status.is_ok

    @property
    def error_message(self) -> str | None:
        return self.status.error_message

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value, status=Status.ok())

    @classmethod
    def failure(cls, error: "Status | str") -> "Result[T]":
        status = error if isinstance(error, Status) else Status.error(error)
        return cls(value=None, status=status)
