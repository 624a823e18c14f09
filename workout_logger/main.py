from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

import workout_logger.models as _models  # noqa: F401 - registers tables with SQLModel metadata
from workout_logger.config import settings
from workout_logger.database import get_store
from workout_logger.exceptions import (
    ApplicationException,
    application_exception_handler,
    generic_exception_handler,
    http_exception_handler,
)
from workout_logger.logger import get_logger
from workout_logger.routers import analytics, exercises, workouts
from workout_logger.storage import WorkoutStore, open_store

logger = get_logger("workout_logger", settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Opening workout store (storage=%s)", settings.STORAGE)
    app.state.store = open_store(settings)
    yield
    app.state.store.close()
    logger.info("Workout store closed")


app = FastAPI(title="Workout Logger", lifespan=lifespan)

app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(workouts.router, prefix="/api/workouts", tags=["workouts"])
app.include_router(exercises.router, prefix="/api/exercises", tags=["exercises"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])


@app.get("/api/health")
def health(store: Annotated[WorkoutStore, Depends(get_store)]):
    return {
        "status": "ok",
        "storage": store.name,
        "exercise_details": store.capabilities.exercise_details,
        "transactions": store.capabilities.transactions,
    }
