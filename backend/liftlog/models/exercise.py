import datetime as dt
from enum import Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, Date
from liftlog.db import Base

class ExerciseCategory(str, Enum):
    back = "Back"
    chest = "Chest"
    legs = "Legs"
    arms = "Arms"
    shoulders = "Shoulders"
    abs = "Abs"

class Exercise(Base):
    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    # unconstrained here; ExerciseWriter checks it against ExerciseCategory
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    sets = relationship(
        "ExerciseSet",
        back_populates="exercise",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ExerciseSet.id",
    )
