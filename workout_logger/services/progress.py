"""Aggregations behind the home, progress and calendar views.

Everything here works on workouts that were already fetched; nothing touches
storage and nothing is cached.
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta

from workout_logger.models import WorkoutRead

HISTOGRAM_WEEKS = 8
TREND_LENGTH = 10


@dataclass
class ProgressSummary:
    total_workouts: int
    weekly_workouts: int
    total_duration: int
    average_duration: int


@dataclass
class WeekBucket:
    label: str  # M/D of the window start
    start: date
    end: date
    count: int


@dataclass
class TrendPoint:
    label: str  # W1..Wn, oldest first
    workout_id: int
    date: date
    duration: int


@dataclass
class MonthlyStats:
    year: int
    month: int
    workouts: int
    total_duration: int
    average_duration: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _average(total: int, count: int) -> int:
    return round_half_up(total / count) if count else 0


def summarize(workouts: list[WorkoutRead], today: date | None = None) -> ProgressSummary:
    today = today or date.today()
    since = today - timedelta(days=7)
    total_duration = sum(w.duration or 0 for w in workouts)
    return ProgressSummary(
        total_workouts=len(workouts),
        weekly_workouts=sum(1 for w in workouts if w.date >= since),
        total_duration=total_duration,
        average_duration=_average(total_duration, len(workouts)),
    )


def weekly_histogram(
    workouts: list[WorkoutRead],
    today: date | None = None,
    weeks: int = HISTOGRAM_WEEKS,
) -> list[WeekBucket]:
    """Workout counts for ``weeks`` seven-day windows ending with the one
    that starts today, oldest first."""
    today = today or date.today()
    buckets: list[WeekBucket] = []
    for i in range(weeks - 1, -1, -1):
        start = today - timedelta(days=7 * i)
        end = start + timedelta(days=6)
        buckets.append(
            WeekBucket(
                label=f"{start.month}/{start.day}",
                start=start,
                end=end,
                count=sum(1 for w in workouts if start <= w.date <= end),
            )
        )
    return buckets


def duration_trend(workouts: list[WorkoutRead], limit: int = TREND_LENGTH) -> list[TrendPoint]:
    # Input is newest first; the trend reads left to right
    recent = list(reversed(workouts[:limit]))
    return [
        TrendPoint(label=f"W{idx}", workout_id=w.id, date=w.date, duration=w.duration or 0)
        for idx, w in enumerate(recent, start=1)
    ]


def monthly_stats(workouts: list[WorkoutRead], today: date | None = None) -> MonthlyStats:
    today = today or date.today()
    in_month = [w for w in workouts if w.date.year == today.year and w.date.month == today.month]
    total_duration = sum(w.duration or 0 for w in in_month)
    return MonthlyStats(
        year=today.year,
        month=today.month,
        workouts=len(in_month),
        total_duration=total_duration,
        average_duration=_average(total_duration, len(in_month)),
    )


def group_by_date(workouts: list[WorkoutRead]) -> dict[str, list[WorkoutRead]]:
    grouped: dict[str, list[WorkoutRead]] = defaultdict(list)
    for workout in workouts:
        grouped[workout.date.isoformat()].append(workout)
    return dict(grouped)


def format_duration(minutes: int | None) -> str:
    if not minutes:
        return "0min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}min"
