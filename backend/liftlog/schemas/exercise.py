import datetime as dt
from pydantic import BaseModel, Field

class SetRead(BaseModel):
    id: int
    weight: int
    reps: int

    model_config = {"from_attributes": True}

class ExerciseSummary(BaseModel):
    id: int
    date: dt.date
    category: str
    name: str

    model_config = {"from_attributes": True}

class ExerciseRead(ExerciseSummary):
    # ordered by set id, i.e. insertion order
    sets: list[SetRead] = Field(default_factory=list)

class ExercisesCreated(BaseModel):
    message: str = "Exercises created successfully."
    created_exercises: list[ExerciseSummary] = Field(alias="createdExercises")

    model_config = {"populate_by_name": True}

class Message(BaseModel):
    message: str
