import os

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Storage layout
NOTES_TABLE = os.getenv("NOTES_TABLE", "notes")
ATTACHMENTS_BUCKET = os.getenv("ATTACHMENTS_BUCKET", "note-attachments")

# Quiet period after the last keystroke before a search is sent
SEARCH_DEBOUNCE_SECONDS = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))

# JWKS cache lifetime for bearer token verification
JWKS_CACHE_SECONDS = int(os.getenv("JWKS_CACHE_SECONDS", str(60 * 60)))

# HTTP
CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
