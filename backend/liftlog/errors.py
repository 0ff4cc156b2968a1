# liftlog/errors.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any


class WorkoutError(Exception):
    """Base for every failure the store or the writer reports.

    ``kind`` is the stable label the HTTP layer maps to a status code.
    """
    kind = "WorkoutError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "error": self.message}


class ValidationError(WorkoutError):
    """Malformed or missing caller input; nothing was written."""
    kind = "ValidationError"


class NotFound(WorkoutError):
    kind = "NotFound"


class ReferentialError(WorkoutError):
    """A set row pointed at an exercise id that does not exist."""
    kind = "ReferentialError"


class StorageFault(WorkoutError):
    """The database or the transaction control itself failed. Never retried."""
    kind = "StorageFault"


@dataclass(slots=True)
class ItemFailure:
    index: int
    reason: str
    set_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "setIndex": self.set_index, "reason": self.reason}


class WriteFailed(WorkoutError):
    """One or more items of a batch failed; the whole unit of work was rolled back."""
    kind = "WriteFailed"

    def __init__(self, message: str, failures: list[ItemFailure] | None = None):
        super().__init__(message)
        self.failures = list(failures or [])

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["failures"] = [f.to_dict() for f in self.failures]
        return body
