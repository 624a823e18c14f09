from fastapi import APIRouter

from workout_logger.database import RepositoryDep
from workout_logger.models import CategoryRead, ExerciseRead

router = APIRouter()


@router.get("/", response_model=list[ExerciseRead])
def list_exercises(repository: RepositoryDep):
    return repository.exercises()


@router.get("/categories", response_model=list[CategoryRead])
def list_categories(repository: RepositoryDep):
    return repository.categories()
