from datetime import date, datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from workout_logger.exceptions import WorkoutSaveError
from workout_logger.models import ExerciseDraft, SetEntry, WorkoutDraft
from workout_logger.services.repository import (
    WorkoutRepository,
    pack_exercise,
    pack_workout,
    serialize_values,
)
from workout_logger.storage import KeyValueStore


class BrokenStore(KeyValueStore):
    """Key-value store whose every query fails like a broken database."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    get_workouts = _fail
    get_workout_by_id = _fail
    get_exercises = _fail
    get_exercise_categories = _fail
    get_workout_stats = _fail
    get_workouts_by_date_range = _fail
    save_workout = _fail


def _draft(exercises: list[ExerciseDraft] | None = None, **overrides) -> WorkoutDraft:
    start = datetime(2026, 10, 18, 7, 0)
    values = {
        "name": "Morning Session",
        "start_time": start,
        "end_time": start + timedelta(minutes=52, seconds=40),
        "notes": "Felt strong",
        "exercises": exercises or [],
    }
    values.update(overrides)
    return WorkoutDraft(**values)


def _exercise_id(repository: WorkoutRepository, name: str) -> int:
    return next(e.id for e in repository.exercises() if e.name == name)


# ---------------------------------------------------------------------------
# Packing
# ---------------------------------------------------------------------------


def test_serialize_values():
    assert serialize_values([10, 10, 8]) == "10,10,8"
    assert serialize_values([100.0, 97.5]) == "100,97.5"
    assert serialize_values([12, None, 8]) == "12,,8"
    assert serialize_values([]) == ""


def test_pack_workout_derives_duration_and_times():
    workout = pack_workout(_draft())
    assert workout.duration == 53
    assert workout.start_time == "07:00"
    assert workout.end_time == "07:52"
    assert workout.date == date(2026, 10, 18)
    assert workout.notes == "Felt strong"


def test_pack_workout_explicit_date():
    workout = pack_workout(_draft(date=date(2026, 10, 1)))
    assert workout.date == date(2026, 10, 1)


def test_pack_exercise_keeps_set_positions():
    entry = pack_exercise(
        ExerciseDraft(
            exercise_id=3,
            sets=[
                SetEntry(reps=10, weight=100, completed=True),
                SetEntry(reps=None, weight=95, completed=False),
            ],
            rest_time=90,
        )
    )
    assert entry.exercise_id == 3
    assert entry.sets == 2
    assert entry.reps == "10,"
    assert entry.weight == "100,95"
    assert entry.rest_time == 90
    assert [s.completed for s in entry.set_entries] == [True, False]


# ---------------------------------------------------------------------------
# Logging flow
# ---------------------------------------------------------------------------


def test_log_workout_with_two_exercises(repository: WorkoutRepository):
    bench = _exercise_id(repository, "Bench Press")
    curls = _exercise_id(repository, "Bicep Curls")
    workout_id = repository.log_workout(
        _draft(
            [
                ExerciseDraft(
                    exercise_id=bench,
                    sets=[
                        SetEntry(reps=10, weight=100),
                        SetEntry(reps=10, weight=100),
                        SetEntry(reps=8, weight=95),
                    ],
                ),
                ExerciseDraft(exercise_id=curls, sets=[SetEntry(reps=12, weight=50)]),
            ]
        )
    )

    detail = repository.get_workout(workout_id)
    assert detail.name == "Morning Session"
    assert detail.duration == 53
    assert len(detail.exercises) == 2
    assert [e.sets for e in detail.exercises] == [3, 1]
    assert detail.exercises[0].reps == "10,10,8"
    assert detail.exercises[0].weight == "100,100,95"
    assert detail.exercises[1].reps == "12"
    assert detail.exercises[1].weight == "50"


def test_log_workout_accepts_empty_name(repository: WorkoutRepository):
    workout_id = repository.log_workout(_draft(name=""))
    assert repository.get_workout(workout_id).name == ""


def test_log_workout_on_key_value_store(kv_store: KeyValueStore):
    repository = WorkoutRepository(kv_store)
    bench = _exercise_id(repository, "Bench Press")
    workout_id = repository.log_workout(
        _draft([ExerciseDraft(exercise_id=bench, sets=[SetEntry(reps=5, weight=80)])])
    )
    assert repository.capabilities.exercise_details is False
    detail = repository.get_workout(workout_id)
    assert detail.duration == 53
    assert detail.exercises == []


def test_log_workout_invalid_exercise_raises_and_rolls_back(repository: WorkoutRepository):
    with pytest.raises(WorkoutSaveError):
        repository.log_workout(_draft([ExerciseDraft(exercise_id=99999, sets=[SetEntry(reps=1)])]))
    assert repository.recent_workouts() == []


def test_log_workout_store_failure():
    store = BrokenStore()
    store.initialize()
    with pytest.raises(WorkoutSaveError) as excinfo:
        WorkoutRepository(store).log_workout(_draft())
    assert excinfo.value.status_code == 500
    assert "try again" in excinfo.value.message


def test_add_exercise(repository: WorkoutRepository):
    workout_id = repository.log_workout(_draft())
    squats = _exercise_id(repository, "Squats")
    link_id = repository.add_exercise(workout_id, squats, [SetEntry(reps=5, weight=140)])
    assert isinstance(link_id, int)
    assert repository.get_workout(workout_id).exercises[0].weight == "140"


def test_clear_all_data(repository: WorkoutRepository):
    repository.log_workout(_draft())
    repository.clear_all_data()
    assert repository.recent_workouts() == []
    assert len(repository.exercises()) == 17


# ---------------------------------------------------------------------------
# Read recovery
# ---------------------------------------------------------------------------


def test_failed_reads_return_defaults():
    store = BrokenStore()
    store.initialize()
    repository = WorkoutRepository(store)

    assert repository.recent_workouts() == []
    assert repository.get_workout(1) is None
    assert repository.exercises() == []
    assert repository.categories() == []
    assert repository.workouts_between(date(2026, 1, 1), date(2026, 12, 31)) == []
    stats = repository.stats()
    assert stats.total_workouts == 0
    assert stats.weekly_workouts == 0
