"""
Workout storage backends.

Two interchangeable stores share one contract:

* ``SQLStore`` keeps everything in SQLite through SQLModel.
* ``KeyValueStore`` keeps JSON collections under fixed string keys, the way
  a browser's local storage would. It does not persist per-exercise detail
  for logged workouts; ``capabilities.exercise_details`` says so.

``open_store`` picks one according to the ``WORKOUT_LOGGER_STORAGE`` setting.
"""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path

from sqlalchemy import delete, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine, func, select

from workout_logger.config import Settings, settings
from workout_logger.models import (
    CategoryRead,
    Exercise,
    ExerciseCategory,
    ExerciseEntry,
    ExerciseRead,
    SetRead,
    Workout,
    WorkoutCreate,
    WorkoutDetail,
    WorkoutExercise,
    WorkoutExerciseRead,
    WorkoutRead,
    WorkoutSet,
    WorkoutStats,
    utcnow,
)
from workout_logger.seed import catalog_rows, seed_reference_data

logger = logging.getLogger(__name__)

# Workouts dated on or after today minus this many days count as "this week"
WEEKLY_WINDOW_DAYS = 7


def _check_limit(limit: int) -> int:
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")
    return limit


@dataclass(frozen=True)
class StoreCapabilities:
    exercise_details: bool  # per-exercise rows of a workout are persisted
    transactions: bool  # save_workout is all-or-nothing


class WorkoutStore(ABC):
    name: str
    capabilities: StoreCapabilities

    @abstractmethod
    def initialize(self) -> None: ...

    def close(self) -> None:
        pass

    @abstractmethod
    def create_workout(self, workout: WorkoutCreate) -> int: ...

    @abstractmethod
    def add_exercise_to_workout(self, workout_id: int, entry: ExerciseEntry) -> int | None:
        """Returns the new link id, or None when the store drops exercise detail."""

    @abstractmethod
    def save_workout(self, workout: WorkoutCreate, entries: list[ExerciseEntry]) -> int: ...

    @abstractmethod
    def get_workouts(self, limit: int = 10) -> list[WorkoutRead]: ...

    @abstractmethod
    def get_workout_by_id(self, workout_id: int) -> WorkoutDetail | None: ...

    @abstractmethod
    def get_exercises(self) -> list[ExerciseRead]: ...

    @abstractmethod
    def get_exercise_categories(self) -> list[CategoryRead]: ...

    @abstractmethod
    def get_workout_stats(self, today: date | None = None) -> WorkoutStats: ...

    @abstractmethod
    def get_workouts_by_date_range(self, start: date, end: date) -> list[WorkoutRead]: ...

    @abstractmethod
    def clear_all_data(self) -> None: ...


# ---------------------------------------------------------------------------
# Relational store
# ---------------------------------------------------------------------------


def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SQLStore(WorkoutStore):
    name = "sql"
    capabilities = StoreCapabilities(exercise_details=True, transactions=True)

    def __init__(self, database_url: str | None = None, engine: Engine | None = None):
        self.database_url = database_url or settings.DATABASE_URL
        self.engine = engine

    def initialize(self) -> None:
        if self.engine is None:
            self.engine = create_engine(
                self.database_url, connect_args={"check_same_thread": False}
            )
        if not event.contains(self.engine, "connect", _enable_foreign_keys):
            event.listen(self.engine, "connect", _enable_foreign_keys)

        with self.engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA foreign_keys=ON")
            # Better read performance for file databases; a no-op in memory
            conn.exec_driver_sql("PRAGMA journal_mode=WAL")

        SQLModel.metadata.create_all(self.engine)
        with Session(self.engine) as session:
            seed_reference_data(session)
        logger.info("Opened relational store at %s", self.engine.url)

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()

    # -- writes -------------------------------------------------------------

    def create_workout(self, workout: WorkoutCreate) -> int:
        with Session(self.engine) as session:
            row = Workout(**workout.model_dump())
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.id

    def add_exercise_to_workout(self, workout_id: int, entry: ExerciseEntry) -> int | None:
        with Session(self.engine) as session:
            with session.begin():
                link_id = self._insert_exercise(session, workout_id, entry)
            return link_id

    def save_workout(self, workout: WorkoutCreate, entries: list[ExerciseEntry]) -> int:
        with Session(self.engine) as session:
            # Parent and children commit together or not at all
            with session.begin():
                row = Workout(**workout.model_dump())
                session.add(row)
                session.flush()
                workout_id = row.id
                for entry in entries:
                    self._insert_exercise(session, workout_id, entry)
            return workout_id

    def _insert_exercise(self, session: Session, workout_id: int, entry: ExerciseEntry) -> int:
        link = WorkoutExercise(workout_id=workout_id, **entry.model_dump(exclude={"set_entries"}))
        session.add(link)
        session.flush()
        for set_number, set_entry in enumerate(entry.set_entries, start=1):
            session.add(
                WorkoutSet(
                    workout_exercise_id=link.id,
                    set_number=set_number,
                    reps=set_entry.reps,
                    weight=set_entry.weight,
                    completed=set_entry.completed,
                )
            )
        session.flush()
        return link.id

    def clear_all_data(self) -> None:
        """Delete sets, workout exercises and workouts. The catalog stays."""
        with Session(self.engine) as session:
            with session.begin():
                for model in [WorkoutSet, WorkoutExercise, Workout]:
                    session.exec(delete(model))

    # -- reads --------------------------------------------------------------

    def get_workouts(self, limit: int = 10) -> list[WorkoutRead]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Workout)
                .order_by(Workout.date.desc(), Workout.created_at.desc(), Workout.id.desc())
                .limit(_check_limit(limit))
            ).all()
            return [WorkoutRead.model_validate(row) for row in rows]

    def get_workout_by_id(self, workout_id: int) -> WorkoutDetail | None:
        with Session(self.engine) as session:
            workout = session.get(Workout, workout_id)
            if workout is None:
                return None

            rows = session.exec(
                select(WorkoutExercise, Exercise, ExerciseCategory)
                .join(Exercise, Exercise.id == WorkoutExercise.exercise_id)
                .join(ExerciseCategory, ExerciseCategory.id == Exercise.category_id)
                .where(WorkoutExercise.workout_id == workout_id)
                .order_by(WorkoutExercise.id)
            ).all()

            exercises: list[WorkoutExerciseRead] = []
            for link, exercise, category in rows:
                sets = session.exec(
                    select(WorkoutSet)
                    .where(WorkoutSet.workout_exercise_id == link.id)
                    .order_by(WorkoutSet.set_number)
                ).all()
                exercises.append(
                    WorkoutExerciseRead(
                        **link.model_dump(),
                        exercise_name=exercise.name,
                        muscle_groups=exercise.muscle_groups,
                        category_name=category.name,
                        set_entries=[SetRead.model_validate(s) for s in sets],
                    )
                )

            return WorkoutDetail(
                **WorkoutRead.model_validate(workout).model_dump(),
                exercises=exercises,
            )

    def get_exercises(self) -> list[ExerciseRead]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Exercise, ExerciseCategory)
                .join(ExerciseCategory, ExerciseCategory.id == Exercise.category_id)
                .order_by(ExerciseCategory.name, Exercise.name)
            ).all()
            return [
                ExerciseRead(
                    **exercise.model_dump(),
                    category_name=category.name,
                    category_color=category.color,
                )
                for exercise, category in rows
            ]

    def get_exercise_categories(self) -> list[CategoryRead]:
        with Session(self.engine) as session:
            rows = session.exec(select(ExerciseCategory).order_by(ExerciseCategory.name)).all()
            return [CategoryRead.model_validate(row) for row in rows]

    def get_workout_stats(self, today: date | None = None) -> WorkoutStats:
        since = (today or date.today()) - timedelta(days=WEEKLY_WINDOW_DAYS)
        with Session(self.engine) as session:
            total = session.exec(select(func.count(Workout.id))).one()
            weekly = session.exec(select(func.count(Workout.id)).where(Workout.date >= since)).one()
        return WorkoutStats(total_workouts=total, weekly_workouts=weekly)

    def get_workouts_by_date_range(self, start: date, end: date) -> list[WorkoutRead]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Workout)
                .where(Workout.date >= start, Workout.date <= end)
                .order_by(Workout.date, Workout.created_at, Workout.id)
            ).all()
            return [WorkoutRead.model_validate(row) for row in rows]


# ---------------------------------------------------------------------------
# Key-value store
# ---------------------------------------------------------------------------

NAMESPACE = "@workout_logger:"
COLLECTIONS = ("workouts", "exercises", "exercise_categories")


def _millis() -> int:
    return int(time.time() * 1000)


class KeyValueStore(WorkoutStore):
    """JSON collections under ``NAMESPACE`` keys, optionally mirrored to a file."""

    name = "kv"
    capabilities = StoreCapabilities(exercise_details=False, transactions=False)

    def __init__(self, path: str | Path | None = None, clock=_millis):
        self.path = Path(path) if path else None
        self._clock = clock
        self._items: dict[str, str] = {}
        self._lock = threading.Lock()

    # -- raw key-value access ----------------------------------------------

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        if self.path is not None:
            self.path.write_text(json.dumps(self._items), encoding="utf-8")

    def _read(self, collection: str) -> list[dict]:
        raw = self.get_item(NAMESPACE + collection)
        return json.loads(raw) if raw else []

    def _write(self, collection: str, rows: list[dict]) -> None:
        self.set_item(NAMESPACE + collection, json.dumps(rows))

    def _load_file(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            self._items = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Key-value file %s is unreadable, starting empty", self.path)
            self._items = {}

    # -- contract -----------------------------------------------------------

    def initialize(self) -> None:
        with self._lock:
            self._load_file()
            for collection in COLLECTIONS:
                if self.get_item(NAMESPACE + collection) is None:
                    self._write(collection, [])
            if not self._read("exercises"):
                categories, exercises = catalog_rows()
                self._write("exercise_categories", categories)
                self._write("exercises", exercises)
                logger.info(
                    "Seeded %d categories and %d exercises", len(categories), len(exercises)
                )
        logger.info("Opened key-value store%s", f" at {self.path}" if self.path else "")

    def create_workout(self, workout: WorkoutCreate) -> int:
        with self._lock:
            rows = self._read("workouts")
            workout_id = self._clock()
            # Two workouts in the same millisecond must not share an id
            last_id = max((row["id"] for row in rows), default=0)
            if workout_id <= last_id:
                workout_id = last_id + 1
            record = WorkoutRead(id=workout_id, created_at=utcnow(), **workout.model_dump())
            rows.append(record.model_dump(mode="json"))
            self._write("workouts", rows)
        return workout_id

    def add_exercise_to_workout(self, workout_id: int, entry: ExerciseEntry) -> int | None:
        logger.debug("Exercise detail not persisted for workout %s", workout_id)
        return None

    def save_workout(self, workout: WorkoutCreate, entries: list[ExerciseEntry]) -> int:
        workout_id = self.create_workout(workout)
        for entry in entries:
            self.add_exercise_to_workout(workout_id, entry)
        return workout_id

    def clear_all_data(self) -> None:
        with self._lock:
            self._write("workouts", [])

    def _workouts(self) -> list[WorkoutRead]:
        return [WorkoutRead.model_validate(row) for row in self._read("workouts")]

    def get_workouts(self, limit: int = 10) -> list[WorkoutRead]:
        limit = _check_limit(limit)
        rows = sorted(self._workouts(), key=lambda w: (w.date, w.created_at, w.id), reverse=True)
        return rows[:limit]

    def get_workout_by_id(self, workout_id: int) -> WorkoutDetail | None:
        for workout in self._workouts():
            if workout.id == workout_id:
                return WorkoutDetail(**workout.model_dump(), exercises=[])
        return None

    def get_exercises(self) -> list[ExerciseRead]:
        categories = {row["id"]: row for row in self._read("exercise_categories")}
        result: list[ExerciseRead] = []
        for row in self._read("exercises"):
            category = categories.get(row["category_id"])
            if category is None:
                continue
            result.append(
                ExerciseRead(
                    **row,
                    category_name=category["name"],
                    category_color=category["color"],
                )
            )
        return sorted(result, key=lambda e: (e.category_name, e.name))

    def get_exercise_categories(self) -> list[CategoryRead]:
        rows = [CategoryRead.model_validate(row) for row in self._read("exercise_categories")]
        return sorted(rows, key=lambda c: c.name)

    def get_workout_stats(self, today: date | None = None) -> WorkoutStats:
        since = (today or date.today()) - timedelta(days=WEEKLY_WINDOW_DAYS)
        workouts = self._workouts()
        return WorkoutStats(
            total_workouts=len(workouts),
            weekly_workouts=sum(1 for w in workouts if w.date >= since),
        )

    def get_workouts_by_date_range(self, start: date, end: date) -> list[WorkoutRead]:
        rows = [w for w in self._workouts() if start <= w.date <= end]
        return sorted(rows, key=lambda w: (w.date, w.created_at, w.id))


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def open_store(config: Settings = settings) -> WorkoutStore:
    """Open and seed the configured store."""
    if config.STORAGE == "kv":
        store: WorkoutStore = KeyValueStore(config.KV_PATH)
        store.initialize()
        return store

    store = SQLStore(config.DATABASE_URL)
    try:
        store.initialize()
    except SQLAlchemyError:
        if config.STORAGE == "sql":
            raise
        logger.exception(
            "Could not open relational store at %s, falling back to key-value storage",
            config.DATABASE_URL,
        )
        store = KeyValueStore(config.KV_PATH)
        store.initialize()
    return store
