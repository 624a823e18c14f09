from datetime import date

from sqlmodel import Session, SQLModel, func, select

from workout_logger.models import Exercise, ExerciseCategory
from workout_logger.seed import CATEGORIES, EXERCISES, catalog_rows, seed_demo_workouts, seed_reference_data
from workout_logger.services.repository import WorkoutRepository
from workout_logger.storage import KeyValueStore, SQLStore


def _counts(session: Session) -> tuple[int, int]:
    categories = session.exec(select(func.count(ExerciseCategory.id))).one()
    exercises = session.exec(select(func.count(Exercise.id))).one()
    return categories, exercises


def test_catalog_size():
    assert len(CATEGORIES) == 7
    assert len(EXERCISES) == 17


def test_initialize_seeds_catalog(session: Session):
    assert _counts(session) == (7, 17)


def test_seed_is_idempotent(session: Session):
    assert seed_reference_data(session) == 0
    assert _counts(session) == (7, 17)


def test_initialize_twice_keeps_counts(sql_store: SQLStore, session: Session):
    sql_store.initialize()
    assert _counts(session) == (7, 17)


def test_exercises_reference_existing_categories(session: Session):
    category_ids = set(session.exec(select(ExerciseCategory.id)).all())
    for exercise in session.exec(select(Exercise)).all():
        assert exercise.category_id in category_ids


def test_unknown_category_is_skipped(engine):
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        inserted = seed_reference_data(
            session,
            categories=[("Legs", "walk", "#45B7D1")],
            exercises=[
                ("Squats", "Legs", "Quadriceps, Glutes", "Barbell"),
                ("Mystery Move", "Nowhere", "Unknown", "None"),
            ],
        )
        assert inserted == 1
        names = session.exec(select(Exercise.name)).all()
    assert names == ["Squats"]


def test_catalog_rows_skip_unknown_category():
    categories, exercises = catalog_rows(
        categories=[("Core", "fitness", "#FF9FF3")],
        exercises=[
            ("Plank", "Core", "Core, Shoulders", "Bodyweight"),
            ("Ghost", "Missing", "", ""),
        ],
    )
    assert categories == [{"id": 1, "name": "Core", "icon": "fitness", "color": "#FF9FF3"}]
    assert [e["name"] for e in exercises] == ["Plank"]
    assert exercises[0]["category_id"] == 1


def test_key_value_initialize_twice_keeps_counts(kv_store: KeyValueStore):
    kv_store.initialize()
    assert len(kv_store.get_exercise_categories()) == 7
    assert len(kv_store.get_exercises()) == 17


def test_seed_demo_workouts(repository: WorkoutRepository):
    today = date(2026, 3, 1)
    logged = seed_demo_workouts(repository, weeks=2, today=today)
    assert logged == 8
    workouts = repository.recent_workouts(limit=100)
    assert len(workouts) == logged
    assert workouts[0].date == today

    detail = repository.get_workout(workouts[0].id)
    assert len(detail.exercises) == 3
    assert all(e.sets == len(e.set_entries) for e in detail.exercises)
