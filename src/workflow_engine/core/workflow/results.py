"""Failure reasons and the result type returned by every core operation.

Core operations never raise for caller mistakes. They return a
:class:`Result` that either carries a value or a :class:`Failure` tagged with
a :class:`FailureReason` and the offending ids.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureReason(str, Enum):
    DUPLICATE_DEFINITION = "DuplicateDefinition"
    INVALID_INITIAL_STATE_COUNT = "InvalidInitialStateCount"
    DUPLICATE_STATE_ID = "DuplicateStateId"
    DANGLING_STATE_REFERENCE = "DanglingStateReference"
    DEFINITION_NOT_FOUND = "DefinitionNotFound"
    NO_USABLE_INITIAL_STATE = "NoUsableInitialState"
    INSTANCE_NOT_FOUND = "InstanceNotFound"
    ACTION_NOT_AVAILABLE = "ActionNotAvailable"
    ACTION_NOT_ALLOWED_FROM_CURRENT_STATE = "ActionNotAllowedFromCurrentState"
    TARGET_STATE_UNAVAILABLE = "TargetStateUnavailable"
    CANNOT_LEAVE_FINAL_STATE = "CannotLeaveFinalState"


@dataclass(frozen=True, slots=True)
class Failure:
    reason: FailureReason
    message: str
    details: dict[str, object] = field(default_factory=dict)

    def to_json(self) -> dict[str, object]:
        return {"reason": self.reason.value, "message": self.message, "details": self.details}


class WorkflowError(Exception):
    """Raised by :meth:`Result.unwrap` when the result is a failure."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(failure.message)
        self.failure = failure

    @property
    def reason(self) -> FailureReason:
        return self.failure.reason

    def __str__(self) -> str:
        return f"{self.failure.reason.value}: {self.failure.message}"


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    value: T | None = None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, reason: FailureReason, message: str, **details: object) -> Result[T]:
        return cls(failure=Failure(reason=reason, message=message, details=details))

    def unwrap(self) -> T | None:
        if self.failure is not None:
            raise WorkflowError(self.failure)
        return self.value
