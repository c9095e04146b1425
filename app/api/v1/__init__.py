"""API v1 router."""
from fastapi import APIRouter

from app.api.v1 import auth, lessons, student
from app.schemas.common import ErrorResponse

# Domain errors are rendered by the handlers in app.main
error_responses = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(lessons.router, prefix="/lessons", tags=["Lesson Authoring"], responses=error_responses)
api_router.include_router(student.router, prefix="/student", tags=["Student Progress"], responses=error_responses)
