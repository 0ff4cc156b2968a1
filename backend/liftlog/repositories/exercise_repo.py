# liftlog/repositories/exercise_repo.py
from __future__ import annotations
import datetime as dt
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from liftlog.errors import ReferentialError, StorageFault
from liftlog.models import Exercise, ExerciseSet
from liftlog.repositories.base import BaseRepository, storage_errors
from liftlog.schemas.exercise import ExerciseRead, SetRead

@dataclass(slots=True)
class ExerciseFilter:
    category: str | None = None
    name: str | None = None  # case-insensitive substring
    date_from: dt.date | None = None
    date_to: dt.date | None = None

class ExerciseRepository(BaseRepository[Exercise]):
    """Persistence for exercises and their sets.

    sets.exercise_id carries ON DELETE CASCADE, so removing an exercise removes
    its sets in the same statement. Nothing here commits; see BaseRepository.
    """
    model = Exercise

    # WRITES
    def create_exercise(self, *, date: dt.date, category: str, name: str) -> int:
        ex = Exercise(date=date, category=category, name=name)
        with storage_errors("insert exercise"):
            self.add_and_flush(ex)
        return ex.id

    def create_set(self, exercise_id: int, *, weight: int, reps: int) -> int:
        s = ExerciseSet(exercise_id=exercise_id, weight=weight, reps=reps)
        try:
            self.add_and_flush(s)
        except IntegrityError as e:
            # SQLite: "FOREIGN KEY constraint failed"; Postgres: "violates foreign key constraint"
            if "foreign key" in str(e.orig).lower():
                raise ReferentialError(f"exercise {exercise_id} does not exist") from e
            raise StorageFault(f"insert set failed: {e}") from e
        except SQLAlchemyError as e:
            raise StorageFault(f"insert set failed: {e}") from e
        return s.id

    def delete_sets_for_exercise(self, exercise_id: int) -> int:
        stmt = delete(ExerciseSet).where(ExerciseSet.exercise_id == exercise_id)
        with storage_errors("delete sets"):
            result = self.db.execute(stmt, execution_options={"synchronize_session": False})
        return result.rowcount

    def update_exercise(self, exercise_id: int, *, date: dt.date, category: str, name: str) -> int:
        """Returns rows affected; 0 means there is no such exercise."""
        stmt = (
            update(Exercise)
            .where(Exercise.id == exercise_id)
            .values(date=date, category=category, name=name)
        )
        with storage_errors("update exercise"):
            result = self.db.execute(stmt, execution_options={"synchronize_session": False})
        return result.rowcount

    def delete_exercise(self, exercise_id: int) -> int:
        # single statement; the database cascades to sets
        stmt = delete(Exercise).where(Exercise.id == exercise_id)
        with storage_errors("delete exercise"):
            result = self.db.execute(stmt, execution_options={"synchronize_session": False})
        return result.rowcount

    # READS
    def list_exercises_with_sets(self, filters: Optional[ExerciseFilter] = None) -> list[ExerciseRead]:
        stmt = self._joined_stmt().order_by(
            Exercise.date.desc(), Exercise.id.desc(), ExerciseSet.id.asc()
        )
        if filters is not None:
            if filters.category:
                stmt = stmt.where(Exercise.category == filters.category)
            if filters.name:
                stmt = stmt.where(func.lower(Exercise.name).contains(filters.name.lower()))
            if filters.date_from:
                stmt = stmt.where(Exercise.date >= filters.date_from)
            if filters.date_to:
                stmt = stmt.where(Exercise.date <= filters.date_to)
        with storage_errors("list exercises"):
            rows = self.db.execute(stmt).all()
        return self._group(rows)

    def get_exercise_with_sets(self, exercise_id: int) -> Optional[ExerciseRead]:
        stmt = self._joined_stmt().where(Exercise.id == exercise_id).order_by(ExerciseSet.id.asc())
        with storage_errors("get exercise"):
            rows = self.db.execute(stmt).all()
        grouped = self._group(rows)
        return grouped[0] if grouped else None

    @staticmethod
    def _joined_stmt():
        return select(
            Exercise.id,
            Exercise.date,
            Exercise.category,
            Exercise.name,
            ExerciseSet.id.label("set_id"),
            ExerciseSet.weight,
            ExerciseSet.reps,
        ).outerjoin(ExerciseSet, ExerciseSet.exercise_id == Exercise.id)

    @staticmethod
    def _group(rows: Iterable) -> list[ExerciseRead]:
        # rows arrive already ordered; dicts keep first-seen order
        by_id: dict[int, ExerciseRead] = {}
        for row in rows:
            ex = by_id.get(row.id)
            if ex is None:
                ex = by_id[row.id] = ExerciseRead(
                    id=row.id, date=row.date, category=row.category, name=row.name
                )
            if row.set_id is not None:
                ex.sets.append(SetRead(id=row.set_id, weight=row.weight, reps=row.reps))
        return list(by_id.values())
