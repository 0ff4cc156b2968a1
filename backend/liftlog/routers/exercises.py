from datetime import date
from typing import Any
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.repositories.exercise_repo import ExerciseFilter, ExerciseRepository
from liftlog.schemas.exercise import ExerciseRead, ExercisesCreated, Message
from liftlog.services.exercise_writer import ExerciseWriter

router = APIRouter(prefix="/api/exercises", tags=["exercises"])

def get_writer(db: Session = Depends(get_db)) -> ExerciseWriter:
    return ExerciseWriter(ExerciseRepository(db))

@router.get("", response_model=list[ExerciseRead])
def list_exercises(
    writer: ExerciseWriter = Depends(get_writer),
    category: str | None = Query(None),
    name: str | None = Query(None, description="case-insensitive substring"),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
):
    filters = ExerciseFilter(category=category, name=name, date_from=date_from, date_to=date_to)
    return writer.list_exercises(filters)

@router.get("/{exercise_id}", response_model=ExerciseRead)
def get_exercise(exercise_id: int, writer: ExerciseWriter = Depends(get_writer)):
    return writer.get_exercise(exercise_id)

# Body is left untyped: a single object or a list, validated by the writer
@router.post("", response_model=ExercisesCreated, status_code=status.HTTP_201_CREATED)
def create_exercises(payload: Any = Body(...), writer: ExerciseWriter = Depends(get_writer)):
    created = writer.create_batch(payload)
    return ExercisesCreated(created_exercises=created)

@router.put("/{exercise_id}", response_model=Message)
def update_exercise(
    exercise_id: int,
    payload: Any = Body(...),
    writer: ExerciseWriter = Depends(get_writer),
):
    writer.update_one(exercise_id, payload)
    return Message(message="Exercise updated successfully.")

@router.delete("/{exercise_id}", response_model=Message)
def delete_exercise(exercise_id: int, writer: ExerciseWriter = Depends(get_writer)):
    writer.delete_one(exercise_id)
    return Message(message="Exercise deleted successfully.")
