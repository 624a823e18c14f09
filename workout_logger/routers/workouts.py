from datetime import date

from fastapi import APIRouter, HTTPException, Query

from workout_logger.database import RepositoryDep
from workout_logger.models import WorkoutDetail, WorkoutDraft, WorkoutRead

router = APIRouter()


@router.get("/", response_model=list[WorkoutRead])
def list_workouts(repository: RepositoryDep, limit: int = Query(10, ge=0)):
    return repository.recent_workouts(limit)


@router.post("/", response_model=WorkoutDetail, status_code=201)
def log_workout(draft: WorkoutDraft, repository: RepositoryDep):
    workout_id = repository.log_workout(draft)
    workout = repository.get_workout(workout_id)
    if workout is None:
        raise HTTPException(status_code=500, detail="Workout saved but could not be loaded")
    return workout


@router.get("/range", response_model=list[WorkoutRead])
def list_workouts_in_range(start: date, end: date, repository: RepositoryDep):
    return repository.workouts_between(start, end)


@router.get("/{id}", response_model=WorkoutDetail)
def get_workout(id: int, repository: RepositoryDep):
    workout = repository.get_workout(id)
    if workout is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


@router.delete("/", status_code=204)
def clear_workouts(repository: RepositoryDep):
    repository.clear_all_data()
