import logging

from app import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from app.api.base import api_router  # noqa: E402

logger = logging.getLogger(__name__)

app = FastAPI(
    title="NexoNotes Backend API",
    description="Notes with tags, search and file attachments, stored in Supabase",
    version="1.0.0"
)

# Browsers send the bearer token, so credentials are only allowed for named origins
allow_all_origins = config.CORS_ALLOW_ORIGINS == ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=not allow_all_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(api_router)

if not config.SUPABASE_URL:
    logger.warning("SUPABASE_URL is not set; every notes request will fail until it is configured")


@app.get("/")
def read_root():
    return {
        "service": "nexo-notes-backend",
        "docs": "/docs",
        "health": "/api/health/",
    }
