import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fieldsales.db")

# Connection pool (ignored for SQLite)
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "20"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
DB_LOG_SLOW_QUERIES = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
DB_SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

# Reverse geocoding (OpenStreetMap Nominatim)
# Nominatim usage policy requires a User-Agent identifying the application
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org").rstrip(
    "/"
)
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "FieldSales/1.0")
NOMINATIM_ACCEPT_LANGUAGE = os.getenv("NOMINATIM_ACCEPT_LANGUAGE", "pt-BR")
GEOCODING_ENABLED = os.getenv("GEOCODING_ENABLED", "true").lower() == "true"
GEOCODING_TIMEOUT_SECONDS = float(os.getenv("GEOCODING_TIMEOUT_SECONDS", "5.0"))
GEOCODING_CACHE_SECONDS = int(os.getenv("GEOCODING_CACHE_SECONDS", "86400"))

# Redis (optional). Used for geocode caching and "visited today" marks.
REDIS_URL = os.getenv("REDIS_URL")
VISIT_MARK_TTL_SECONDS = int(os.getenv("VISIT_MARK_TTL_SECONDS", "172800"))

# Frontend base URL for CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", FRONTEND_URL).split(",")
    if origin.strip()
]
