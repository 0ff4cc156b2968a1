# liftlog/repositories/base.py
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from liftlog.errors import StorageFault

T = TypeVar("T")  # SQLAlchemy model type

log = logging.getLogger(__name__)

@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise driver/ORM failures as StorageFault, keeping the cause chained."""
    try:
        yield
    except SQLAlchemyError as e:
        raise StorageFault(f"{action} failed: {e}") from e

class BaseRepository(Generic[T]):
    """Lightweight base for repositories using SQLAlchemy 2.0 style.

    Mutating helpers never commit. The caller delimits the unit of work with
    begin/commit/rollback so several writes land (or vanish) together.
    """
    def __init__(self, db: Session):
        self.db = db
        self._open = False

    @property
    def in_unit_of_work(self) -> bool:
        return self._open

    def begin(self) -> None:
        if self._open:
            raise StorageFault("a unit of work is already open on this session")
        with storage_errors("begin"):
            if self.db.in_transaction():
                # a read outside any unit of work autobegan this one
                self.db.rollback()
            self.db.begin()
        self._open = True
        log.debug("unit of work opened")

    def commit(self) -> None:
        # stays open on failure so the caller can still roll back
        with storage_errors("commit"):
            self.db.commit()
        self._open = False
        log.debug("unit of work committed")

    def rollback(self) -> None:
        try:
            with storage_errors("rollback"):
                self.db.rollback()
        finally:
            self._open = False
        log.debug("unit of work rolled back")

    def add_and_flush(self, entity: T) -> T:
        # SAVEPOINT: a failed insert must not poison the enclosing transaction
        with self.db.begin_nested():
            self.db.add(entity)
        return entity
