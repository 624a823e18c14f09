import calendar
from datetime import date

from fastapi import APIRouter
from sqlmodel import SQLModel

from workout_logger.database import RepositoryDep
from workout_logger.models import WorkoutRead, WorkoutStats
from workout_logger.services.progress import (
    duration_trend,
    format_duration,
    group_by_date,
    monthly_stats,
    summarize,
    weekly_histogram,
)

router = APIRouter()

# How many recent workouts the progress view aggregates over
PROGRESS_SAMPLE = 50


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WeekBucketRead(SQLModel):
    label: str
    start: str  # ISO format
    end: str  # ISO format
    count: int


class TrendPointRead(SQLModel):
    label: str
    workout_id: int
    date: str  # ISO format
    duration: int


class ProgressRead(SQLModel):
    total_workouts: int
    weekly_workouts: int
    total_duration: int
    average_duration: int
    average_duration_label: str
    workouts_per_week: list[WeekBucketRead]
    duration_trend: list[TrendPointRead]


class MonthlyStatsRead(SQLModel):
    year: int
    month: int
    workouts: int
    total_duration: int
    average_duration: int


class CalendarRead(SQLModel):
    start: str  # ISO format
    end: str  # ISO format
    workouts_by_date: dict[str, list[WorkoutRead]]
    month: MonthlyStatsRead


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _shift_months(day: date, months: int) -> date:
    """Same day ``months`` months away, clamped to the end of shorter months."""
    index = day.year * 12 + day.month - 1 + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/stats", response_model=WorkoutStats)
def get_stats(repository: RepositoryDep):
    return repository.stats()


@router.get("/progress", response_model=ProgressRead)
def get_progress(repository: RepositoryDep):
    workouts = repository.recent_workouts(PROGRESS_SAMPLE)
    summary = summarize(workouts)
    return ProgressRead(
        total_workouts=summary.total_workouts,
        weekly_workouts=summary.weekly_workouts,
        total_duration=summary.total_duration,
        average_duration=summary.average_duration,
        average_duration_label=format_duration(summary.average_duration),
        workouts_per_week=[
            WeekBucketRead(
                label=b.label,
                start=b.start.isoformat(),
                end=b.end.isoformat(),
                count=b.count,
            )
            for b in weekly_histogram(workouts)
        ],
        duration_trend=[
            TrendPointRead(
                label=p.label,
                workout_id=p.workout_id,
                date=p.date.isoformat(),
                duration=p.duration,
            )
            for p in duration_trend(workouts)
        ],
    )


@router.get("/calendar", response_model=CalendarRead)
def get_calendar(repository: RepositoryDep, start: date | None = None, end: date | None = None):
    today = date.today()
    start = start or _shift_months(today, -3)
    end = end or _shift_months(today, 1)
    workouts = repository.workouts_between(start, end)
    month = monthly_stats(workouts, today)
    return CalendarRead(
        start=start.isoformat(),
        end=end.isoformat(),
        workouts_by_date=group_by_date(workouts),
        month=MonthlyStatsRead(
            year=month.year,
            month=month.month,
            workouts=month.workouts,
            total_duration=month.total_duration,
            average_duration=month.average_duration,
        ),
    )
