import datetime as dt

from pydantic import field_validator
from sqlmodel import Field, SQLModel


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class User(SQLModel, table=True):
    # Unused; kept so existing databases keep the same shape
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    email: str | None = None
    created_at: dt.datetime = Field(default_factory=utcnow)


class ExerciseCategory(SQLModel, table=True):
    __tablename__ = "exercise_categories"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    icon: str | None = None
    color: str | None = None


class Exercise(SQLModel, table=True):
    __tablename__ = "exercises"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    category_id: int | None = Field(default=None, foreign_key="exercise_categories.id")
    muscle_groups: str | None = None
    equipment: str | None = None
    instructions: str | None = None
    image_url: str | None = None


class WorkoutBase(SQLModel):
    name: str
    date: dt.date = Field(index=True)
    start_time: str | None = None  # HH:MM
    end_time: str | None = None  # HH:MM
    duration: int | None = None  # minutes
    notes: str | None = None


class Workout(WorkoutBase, table=True):
    __tablename__ = "workouts"

    id: int | None = Field(default=None, primary_key=True)
    created_at: dt.datetime = Field(default_factory=utcnow)


class WorkoutExercise(SQLModel, table=True):
    __tablename__ = "workout_exercises"

    id: int | None = Field(default=None, primary_key=True)
    workout_id: int = Field(foreign_key="workouts.id", ondelete="CASCADE")
    exercise_id: int = Field(foreign_key="exercises.id")
    sets: int | None = None
    reps: str | None = None  # comma-joined, one value per set
    weight: str | None = None  # comma-joined, one value per set
    distance: float | None = None
    duration: int | None = None
    rest_time: int | None = None
    notes: str | None = None


class WorkoutSet(SQLModel, table=True):
    __tablename__ = "workout_exercise_sets"

    id: int | None = Field(default=None, primary_key=True)
    workout_exercise_id: int = Field(foreign_key="workout_exercises.id", ondelete="CASCADE")
    set_number: int
    reps: int | None = None
    weight: float | None = None
    completed: bool = False


class PersonalRecord(SQLModel, table=True):
    # Unused; kept so existing databases keep the same shape
    __tablename__ = "personal_records"

    id: int | None = Field(default=None, primary_key=True)
    exercise_id: int = Field(foreign_key="exercises.id")
    record_type: str
    value: float
    unit: str | None = None
    date: dt.date
    workout_id: int | None = Field(default=None, foreign_key="workouts.id")


# ---------------------------------------------------------------------------
# Store input
# ---------------------------------------------------------------------------


class WorkoutCreate(WorkoutBase):
    pass


class SetEntry(SQLModel):
    reps: int | None = None
    weight: float | None = None
    completed: bool = False

    @field_validator("reps", "weight", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        # Unfilled inputs arrive as empty strings
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ExerciseEntry(SQLModel):
    """One exercise of a workout in stored form (sets pre-serialized)."""

    exercise_id: int
    sets: int = 0
    reps: str = ""
    weight: str = ""
    distance: float | None = None
    duration: int | None = None
    rest_time: int | None = None
    notes: str | None = None
    set_entries: list[SetEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Logging-flow input
# ---------------------------------------------------------------------------


class ExerciseDraft(SQLModel):
    exercise_id: int
    sets: list[SetEntry] = Field(default_factory=list)
    distance: float | None = None
    duration: int | None = None
    rest_time: int | None = None
    notes: str | None = None


class WorkoutDraft(SQLModel):
    name: str
    start_time: dt.datetime
    end_time: dt.datetime
    notes: str = ""
    exercises: list[ExerciseDraft] = Field(default_factory=list)
    # Defaults to the day the workout ended
    date: dt.date | None = None


# ---------------------------------------------------------------------------
# Read schemas (shared by every store)
# ---------------------------------------------------------------------------


class CategoryRead(SQLModel):
    id: int
    name: str
    icon: str | None
    color: str | None


class ExerciseRead(SQLModel):
    id: int
    name: str
    category_id: int | None
    muscle_groups: str | None
    equipment: str | None
    instructions: str | None = None
    image_url: str | None = None
    category_name: str
    category_color: str | None


class WorkoutRead(WorkoutBase):
    id: int
    created_at: dt.datetime


class SetRead(SQLModel):
    id: int
    set_number: int
    reps: int | None
    weight: float | None
    completed: bool


class WorkoutExerciseRead(SQLModel):
    id: int
    workout_id: int
    exercise_id: int
    sets: int | None
    reps: str | None
    weight: str | None
    distance: float | None
    duration: int | None
    rest_time: int | None
    notes: str | None
    exercise_name: str
    muscle_groups: str | None
    category_name: str
    set_entries: list[SetRead] = Field(default_factory=list)


class WorkoutDetail(WorkoutRead):
    exercises: list[WorkoutExerciseRead] = Field(default_factory=list)


class WorkoutStats(SQLModel):
    total_workouts: int
    weekly_workouts: int
