"""Health check and monitoring endpoints"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app import config
from app.features.auth.dependencies import get_repositories
from app.infra.supabase.errors import StoreError
from app.infra.supabase.repositories import RepositoryFactory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/store")
async def get_store_health(repos: RepositoryFactory = Depends(get_repositories)):
    """
    Check that the notes table answers.

    Returns 503 with status "unavailable" when the query fails, so load
    balancers can take the instance out of rotation.
    """
    started = time.perf_counter()
    try:
        await repos.notes.find_by_filters({}, limit=1)
    except StoreError as e:
        logger.warning(f"Store health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "table": config.NOTES_TABLE},
        )

    return {
        "status": "healthy",
        "table": config.NOTES_TABLE,
        "bucket": config.ATTACHMENTS_BUCKET,
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
    }


@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "nexo-notes-backend",
    }
