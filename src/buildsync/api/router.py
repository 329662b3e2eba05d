"""Main API router."""

from fastapi import APIRouter
from buildsync.api.events import router as events_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(events_router)
