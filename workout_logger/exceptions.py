import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApplicationException(Exception):
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content={"error": self.message})


class WorkoutSaveError(ApplicationException):
    """Raised when a logged workout could not be persisted."""

    def __init__(self, message: str = "Failed to save workout. Please try again."):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ---------------------------------------------------------------------------
# FastAPI handlers
# ---------------------------------------------------------------------------


async def application_exception_handler(request: Request, exc: ApplicationException):
    logger.warning("Application error on %s: %s", request.url.path, exc.message)
    return exc.to_response()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def generic_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s: %r", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "An unexpected error occurred"},
    )
