"""
Reference catalog (exercise categories and exercises) and seeding helpers.

Seeding runs on every startup and is a no-op once any exercise exists.
Run with: python -m workout_logger.seed [--demo]
"""

import argparse
import logging
import random
from datetime import date, datetime, time, timedelta

from sqlmodel import Session, func, select

from workout_logger.models import (
    Exercise,
    ExerciseCategory,
    ExerciseDraft,
    SetEntry,
    WorkoutDraft,
)

logger = logging.getLogger(__name__)

# Reproducible demo data
RANDOM_SEED = 42

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

# (name, icon, color)
CATEGORIES: list[tuple[str, str, str]] = [
    ("Chest", "fitness", "#FF6B6B"),
    ("Back", "body", "#4ECDC4"),
    ("Legs", "walk", "#45B7D1"),
    ("Shoulders", "fitness", "#96CEB4"),
    ("Arms", "fitness", "#FECA57"),
    ("Core", "fitness", "#FF9FF3"),
    ("Cardio", "heart", "#54A0FF"),
]

# (name, category, muscle groups, equipment)
EXERCISES: list[tuple[str, str, str, str]] = [
    # Chest
    ("Push-ups", "Chest", "Chest, Triceps, Shoulders", "Bodyweight"),
    ("Bench Press", "Chest", "Chest, Triceps, Shoulders", "Barbell"),
    ("Dumbbell Flyes", "Chest", "Chest", "Dumbbells"),
    # Back
    ("Pull-ups", "Back", "Lats, Biceps, Rhomboids", "Pull-up Bar"),
    ("Deadlifts", "Back", "Back, Glutes, Hamstrings", "Barbell"),
    ("Bent Over Rows", "Back", "Lats, Rhomboids", "Barbell"),
    # Legs
    ("Squats", "Legs", "Quadriceps, Glutes", "Barbell"),
    ("Lunges", "Legs", "Quadriceps, Glutes, Calves", "Bodyweight"),
    ("Leg Press", "Legs", "Quadriceps, Glutes", "Machine"),
    # Shoulders
    ("Shoulder Press", "Shoulders", "Shoulders, Triceps", "Dumbbells"),
    ("Lateral Raises", "Shoulders", "Shoulders", "Dumbbells"),
    # Arms
    ("Bicep Curls", "Arms", "Biceps", "Dumbbells"),
    ("Tricep Dips", "Arms", "Triceps", "Bodyweight"),
    # Core
    ("Plank", "Core", "Core, Shoulders", "Bodyweight"),
    ("Crunches", "Core", "Abs", "Bodyweight"),
    # Cardio
    ("Running", "Cardio", "Full Body", "None"),
    ("Cycling", "Cardio", "Legs, Core", "Bike"),
]


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


def seed_reference_data(
    session: Session,
    categories: list[tuple[str, str, str]] = CATEGORIES,
    exercises: list[tuple[str, str, str, str]] = EXERCISES,
) -> int:
    """Insert the catalog unless exercises already exist. Returns exercises inserted."""
    existing = session.exec(select(func.count(Exercise.id))).one()
    if existing > 0:
        return 0

    for name, icon, color in categories:
        session.add(ExerciseCategory(name=name, icon=icon, color=color))
    session.commit()

    inserted = 0
    for name, category_name, muscles, equipment in exercises:
        category_id = session.exec(
            select(ExerciseCategory.id).where(ExerciseCategory.name == category_name)
        ).first()
        if category_id is None:
            continue
        session.add(
            Exercise(
                name=name,
                category_id=category_id,
                muscle_groups=muscles,
                equipment=equipment,
            )
        )
        inserted += 1
    session.commit()

    logger.info("Seeded %d categories and %d exercises", len(categories), inserted)
    return inserted


def catalog_rows(
    categories: list[tuple[str, str, str]] = CATEGORIES,
    exercises: list[tuple[str, str, str, str]] = EXERCISES,
) -> tuple[list[dict], list[dict]]:
    """The catalog as plain rows with sequential ids, for stores without SQL."""
    category_rows = [
        {"id": idx, "name": name, "icon": icon, "color": color}
        for idx, (name, icon, color) in enumerate(categories, start=1)
    ]
    category_ids = {row["name"]: row["id"] for row in category_rows}

    exercise_rows: list[dict] = []
    for name, category_name, muscles, equipment in exercises:
        category_id = category_ids.get(category_name)
        if category_id is None:
            continue
        exercise_rows.append(
            {
                "id": len(exercise_rows) + 1,
                "name": name,
                "category_id": category_id,
                "muscle_groups": muscles,
                "equipment": equipment,
                "instructions": None,
                "image_url": None,
            }
        )
    return category_rows, exercise_rows


# ---------------------------------------------------------------------------
# Demo workouts
# ---------------------------------------------------------------------------

# Workout name -> exercises logged in it
DEMO_TEMPLATES: list[tuple[str, list[str]]] = [
    ("Push Day", ["Bench Press", "Shoulder Press", "Tricep Dips"]),
    ("Pull Day", ["Deadlifts", "Pull-ups", "Bicep Curls"]),
    ("Leg Day", ["Squats", "Lunges", "Leg Press"]),
    ("Core and Cardio", ["Plank", "Crunches", "Running"]),
]

# Base weights (None = bodyweight / reps-only)
DEMO_WEIGHTS: dict[str, float | None] = {
    "Bench Press": 80.0,
    "Shoulder Press": 22.5,
    "Tricep Dips": None,
    "Deadlifts": 120.0,
    "Pull-ups": None,
    "Bicep Curls": 14.0,
    "Squats": 100.0,
    "Lunges": None,
    "Leg Press": 150.0,
    "Plank": None,
    "Crunches": None,
    "Running": None,
}


def seed_demo_workouts(repository, weeks: int = 8, today: date | None = None) -> int:
    """Log a workout every other day for the last ``weeks`` weeks."""
    rng = random.Random(RANDOM_SEED)
    today = today or date.today()
    exercise_ids = {e.name: e.id for e in repository.exercises()}

    logged = 0
    for day_offset in range(weeks * 7, -1, -2):
        workout_date = today - timedelta(days=day_offset)
        name, exercise_names = DEMO_TEMPLATES[logged % len(DEMO_TEMPLATES)]
        start = datetime.combine(workout_date, time(hour=rng.randint(6, 19)))
        end = start + timedelta(minutes=rng.randint(35, 80))

        exercises = []
        for exercise_name in exercise_names:
            if exercise_name not in exercise_ids:
                continue
            base = DEMO_WEIGHTS.get(exercise_name)
            sets = [
                SetEntry(
                    reps=rng.randint(6, 12),
                    weight=None if base is None else round(base * rng.uniform(0.9, 1.1) / 2.5) * 2.5,
                    completed=True,
                )
                for _ in range(rng.randint(3, 4))
            ]
            exercises.append(ExerciseDraft(exercise_id=exercise_ids[exercise_name], sets=sets))

        repository.log_workout(
            WorkoutDraft(
                name=name,
                date=workout_date,
                start_time=start,
                end_time=end,
                exercises=exercises,
            )
        )
        logged += 1
    return logged


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    from workout_logger.config import settings
    from workout_logger.logger import get_logger
    from workout_logger.services.repository import WorkoutRepository
    from workout_logger.storage import open_store

    parser = argparse.ArgumentParser(description="Create the schema and seed the exercise catalog.")
    parser.add_argument("--demo", action="store_true", help="also log sample workouts")
    args = parser.parse_args(argv)

    get_logger("workout_logger", settings.LOG_LEVEL)
    store = open_store(settings)
    try:
        repository = WorkoutRepository(store)
        print(f"Catalog ready: {len(repository.exercises())} exercises.")
        if args.demo:
            print(f"Logged {seed_demo_workouts(repository)} demo workouts.")
    finally:
        store.close()


if __name__ == "__main__":
    main()
