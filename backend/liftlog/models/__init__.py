from liftlog.models.exercise import Exercise, ExerciseCategory
from liftlog.models.exercise_set import ExerciseSet

__all__ = ["Exercise", "ExerciseCategory", "ExerciseSet"]
