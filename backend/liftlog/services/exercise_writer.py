"""Atomic writes of exercises together with their sets.

Every public write runs inside exactly one UnitOfWork. A batch is processed
item by item in input order; failures are collected in a BatchOutcome and the
commit/rollback decision is taken once, after the last item.
"""
from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from liftlog.errors import (
    ItemFailure,
    NotFound,
    ReferentialError,
    StorageFault,
    ValidationError,
    WriteFailed,
)
from liftlog.models import ExerciseCategory
from liftlog.repositories.exercise_repo import ExerciseFilter, ExerciseRepository
from liftlog.schemas.exercise import ExerciseRead, ExerciseSummary

log = logging.getLogger(__name__)

CATEGORIES = frozenset(c.value for c in ExerciseCategory)

# upper bound of the INTEGER columns behind weight and reps
MAX_COUNT = 2_147_483_647


class UnitState(str, Enum):
    PENDING = "pending"
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class UnitOfWork:
    """PENDING -> OPEN -> COMMITTED | ROLLED_BACK over one repository session.

    As a context manager it commits on a clean exit and rolls back when an
    exception escapes, unless commit() or rollback() already ended it.
    A failing commit or rollback surfaces as StorageFault.
    """

    def __init__(self, repo: ExerciseRepository):
        self.repo = repo
        self.state = UnitState.PENDING

    def __enter__(self) -> "UnitOfWork":
        self.repo.begin()
        self.state = UnitState.OPEN
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.state is UnitState.OPEN:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        return False

    def commit(self) -> None:
        self._require_open()
        try:
            self.repo.commit()
        except StorageFault:
            log.error("commit failed, rolling back")
            # a rollback failure here propagates with the commit fault as context
            self.rollback()
            raise
        self.state = UnitState.COMMITTED

    def rollback(self) -> None:
        self._require_open()
        try:
            self.repo.rollback()
        except StorageFault:
            log.critical("rollback failed; transaction state is unknown")
            raise
        finally:
            self.state = UnitState.ROLLED_BACK

    def _require_open(self) -> None:
        if self.state is not UnitState.OPEN:
            raise StorageFault(f"unit of work is {self.state.value}, not open")


@dataclass(slots=True)
class BatchOutcome:
    """Accumulator threaded through one create_batch pass."""
    created: list[ExerciseSummary] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    def fail(self, index: int, reason: str, set_index: int | None = None) -> None:
        if set_index is None:
            log.error("exercise #%d rejected: %s", index, reason)
        else:
            log.error("set #%d of exercise #%d failed: %s", set_index, index, reason)
        self.failures.append(ItemFailure(index=index, reason=reason, set_index=set_index))


@dataclass(slots=True)
class ExerciseFields:
    date: dt.date
    category: str
    name: str
    sets: list[Any]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValueError(f"date must be a YYYY-MM-DD calendar day, got {value!r}")


def parse_exercise(item: Any) -> ExerciseFields:
    """Structural check of one exercise payload. Raises ValueError with the reason."""
    if not isinstance(item, Mapping):
        raise ValueError("exercise must be an object")
    name = item.get("name")
    if name is None:
        name = item.get("exerciseName")
    date, category, sets = item.get("date"), item.get("category"), item.get("sets")
    missing = [k for k, v in (("date", date), ("category", category), ("name", name)) if _blank(v)]
    if missing:
        raise ValueError(f"missing required fields: {', '.join(missing)}")
    if not _is_sequence(sets):
        raise ValueError("sets must be a list")
    if not isinstance(name, str) or not isinstance(category, str):
        raise ValueError("category and name must be strings")
    if category not in CATEGORIES:
        raise ValueError(f"unknown category {category!r}")
    return ExerciseFields(date=_parse_date(date), category=category, name=name.strip(), sets=list(sets))


def _count(value: Any, label: str) -> int:
    # bool is an int subclass; JSON true/false is not a count
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_COUNT:
        raise ValueError(f"{label} must be an integer between 0 and {MAX_COUNT}, got {value!r}")
    return value


def parse_set(entry: Any) -> Optional[tuple[int, int]]:
    """(weight, reps), or None when either is absent and the set is to be skipped.

    Zero is a real value (bodyweight work), only a missing key or null counts as absent.
    """
    if not isinstance(entry, Mapping):
        raise ValueError("set must be an object")
    weight, reps = entry.get("weight"), entry.get("reps")
    if weight is None or reps is None:
        return None
    return _count(weight, "weight"), _count(reps, "reps")


class ExerciseWriter:
    """Create, replace and delete exercises with their sets as single units of work."""

    def __init__(self, repo: ExerciseRepository):
        self.repo = repo

    # READS
    def list_exercises(self, filters: Optional[ExerciseFilter] = None) -> list[ExerciseRead]:
        return self.repo.list_exercises_with_sets(filters)

    def get_exercise(self, exercise_id: int) -> ExerciseRead:
        ex = self.repo.get_exercise_with_sets(exercise_id)
        if ex is None:
            raise NotFound("Exercise not found")
        return ex

    # WRITES
    def create_batch(self, payload: Any) -> list[ExerciseSummary]:
        """Insert one exercise (a mapping) or many (a sequence), each with its sets.

        All or nothing: if any item is malformed or any insert fails, every
        insert of the call is rolled back and WriteFailed lists the failures.
        Items are still attempted after a failure so the report is complete.
        """
        items = list(payload) if _is_sequence(payload) else [payload]
        if not items:
            raise ValidationError("No exercises provided.")
        log.info("creating %d exercise(s)", len(items))

        with UnitOfWork(self.repo) as uow:
            outcome = BatchOutcome()
            for index, item in enumerate(items):
                self._create_one(index, item, outcome)
            if outcome.failed:
                uow.rollback()
                raise WriteFailed("Failed to insert exercises.", outcome.failures)
        log.info("created exercises %s", [c.id for c in outcome.created])
        return outcome.created

    def _create_one(self, index: int, item: Any, outcome: BatchOutcome) -> None:
        try:
            fields = parse_exercise(item)
        except ValueError as e:
            outcome.fail(index, str(e))
            return

        try:
            exercise_id = self.repo.create_exercise(
                date=fields.date, category=fields.category, name=fields.name
            )
        except StorageFault as e:
            outcome.fail(index, e.message)
            return
        outcome.created.append(
            ExerciseSummary(id=exercise_id, date=fields.date, category=fields.category, name=fields.name)
        )

        for set_index, entry in enumerate(fields.sets):
            try:
                values = parse_set(entry)
                if values is None:
                    log.warning("skipping set #%d of exercise %d: weight or reps missing",
                                set_index, exercise_id)
                    continue
                weight, reps = values
                self.repo.create_set(exercise_id, weight=weight, reps=reps)
            except ValueError as e:
                outcome.fail(index, str(e), set_index)
            except (ReferentialError, StorageFault) as e:
                outcome.fail(index, e.message, set_index)

    def update_one(self, exercise_id: int, payload: Any) -> None:
        """Replace the exercise's fields and its whole set list.

        Not a patch: sets absent from ``payload["sets"]`` are gone afterwards.
        On any failure the previous row and sets are left untouched.
        """
        try:
            fields = parse_exercise(payload)
            new_sets = [v for v in (parse_set(e) for e in fields.sets) if v is not None]
        except ValueError as e:
            raise ValidationError(str(e)) from e

        with UnitOfWork(self.repo):
            if self.repo.update_exercise(
                exercise_id, date=fields.date, category=fields.category, name=fields.name
            ) == 0:
                raise NotFound("Exercise not found.")
            removed = self.repo.delete_sets_for_exercise(exercise_id)
            for weight, reps in new_sets:
                self.repo.create_set(exercise_id, weight=weight, reps=reps)
        log.info("exercise %d updated: %d set(s) replaced by %d", exercise_id, removed, len(new_sets))

    def delete_one(self, exercise_id: int) -> None:
        with UnitOfWork(self.repo):
            if self.repo.delete_exercise(exercise_id) == 0:
                raise NotFound("Exercise not found")
        log.info("exercise %d deleted", exercise_id)
