"""API v1 router aggregator."""

from fastapi import APIRouter

from app.api.v1.process_builders.routes import router as process_builders_router
from app.api.v1.tasks.routes import router as tasks_router

api_router = APIRouter()

api_router.include_router(
    process_builders_router,
    prefix="/process-builders",
    tags=["Process Builders"],
)
api_router.include_router(tasks_router, prefix="/tasks", tags=["Tasks"])
