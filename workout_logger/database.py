from typing import Annotated

from fastapi import Depends, Request

from workout_logger.services.repository import WorkoutRepository
from workout_logger.storage import WorkoutStore


def get_store(request: Request) -> WorkoutStore:
    # Opened once in the application lifespan
    return request.app.state.store


def get_repository(store: Annotated[WorkoutStore, Depends(get_store)]) -> WorkoutRepository:
    return WorkoutRepository(store)


RepositoryDep = Annotated[WorkoutRepository, Depends(get_repository)]
