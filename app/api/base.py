from fastapi import APIRouter
from app.api import health
from app.features.auth import router as auth_router
from app.features.notes import router as notes_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(auth_router)
api_router.include_router(notes_router)
