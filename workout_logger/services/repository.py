import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from workout_logger.exceptions import WorkoutSaveError
from workout_logger.models import (
    CategoryRead,
    ExerciseDraft,
    ExerciseEntry,
    ExerciseRead,
    SetEntry,
    WorkoutCreate,
    WorkoutDetail,
    WorkoutDraft,
    WorkoutRead,
    WorkoutStats,
)
from workout_logger.services.progress import round_half_up
from workout_logger.storage import StoreCapabilities, WorkoutStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Packing helpers
# ---------------------------------------------------------------------------


def _format_number(value: float | None) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def serialize_values(values: list[float | None]) -> str:
    """Join per-set values with commas, keeping one position per set."""
    return ",".join(_format_number(v) for v in values)


def pack_sets(
    exercise_id: int,
    sets: list[SetEntry],
    **extra,
) -> ExerciseEntry:
    return ExerciseEntry(
        exercise_id=exercise_id,
        sets=len(sets),
        reps=serialize_values([s.reps for s in sets]),
        weight=serialize_values([s.weight for s in sets]),
        set_entries=sets,
        **extra,
    )


def pack_exercise(draft: ExerciseDraft) -> ExerciseEntry:
    return pack_sets(
        draft.exercise_id,
        draft.sets,
        distance=draft.distance,
        duration=draft.duration,
        rest_time=draft.rest_time,
        notes=draft.notes,
    )


def pack_workout(draft: WorkoutDraft) -> WorkoutCreate:
    """Workout row for a finished session; duration is fixed here, in minutes."""
    minutes = (draft.end_time - draft.start_time).total_seconds() / 60
    return WorkoutCreate(
        name=draft.name,
        date=draft.date or draft.end_time.date(),
        start_time=draft.start_time.strftime("%H:%M"),
        end_time=draft.end_time.strftime("%H:%M"),
        duration=round_half_up(minutes),
        notes=draft.notes,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class WorkoutRepository:
    """Entry point for the API: delegates to a store, recovers failed reads."""

    def __init__(self, store: WorkoutStore):
        self.store = store

    @property
    def capabilities(self) -> StoreCapabilities:
        return self.store.capabilities

    # -- writes -------------------------------------------------------------

    def log_workout(self, draft: WorkoutDraft) -> int:
        workout = pack_workout(draft)
        entries = [pack_exercise(exercise) for exercise in draft.exercises]
        try:
            workout_id = self.store.save_workout(workout, entries)
        except SQLAlchemyError as exc:
            logger.exception("Error saving workout %r", draft.name)
            raise WorkoutSaveError() from exc

        if entries and not self.capabilities.exercise_details:
            logger.info(
                "Workout %s saved without its %d exercises (%s store)",
                workout_id,
                len(entries),
                self.store.name,
            )
        else:
            logger.info("Workout %s saved with %d exercises", workout_id, len(entries))
        return workout_id

    def add_exercise(self, workout_id: int, exercise_id: int, sets: list[SetEntry]) -> int | None:
        return self.store.add_exercise_to_workout(workout_id, pack_sets(exercise_id, sets))

    def clear_all_data(self) -> None:
        self.store.clear_all_data()
        logger.info("Cleared all workout data")

    # -- reads --------------------------------------------------------------

    def _recover(self, what: str, default, fn, *args):
        try:
            return fn(*args)
        except SQLAlchemyError:
            logger.exception("Error loading %s", what)
            return default

    def recent_workouts(self, limit: int = 10) -> list[WorkoutRead]:
        return self._recover("workouts", [], self.store.get_workouts, limit)

    def get_workout(self, workout_id: int) -> WorkoutDetail | None:
        return self._recover(f"workout {workout_id}", None, self.store.get_workout_by_id, workout_id)

    def exercises(self) -> list[ExerciseRead]:
        return self._recover("exercises", [], self.store.get_exercises)

    def categories(self) -> list[CategoryRead]:
        return self._recover("exercise categories", [], self.store.get_exercise_categories)

    def stats(self, today: date | None = None) -> WorkoutStats:
        return self._recover(
            "workout stats",
            WorkoutStats(total_workouts=0, weekly_workouts=0),
            self.store.get_workout_stats,
            today,
        )

    def workouts_between(self, start: date, end: date) -> list[WorkoutRead]:
        return self._recover("workouts by date", [], self.store.get_workouts_by_date_range, start, end)
