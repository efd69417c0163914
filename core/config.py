from dotenv import load_dotenv
import os
from pathlib import Path

load_dotenv()


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def request_budget_seconds(timeout_seconds: float, max_retries: int, base_delay_seconds: float) -> float:
    """Worst-case duration of one retried request: every attempt times out, plus the backoff sleeps."""
    attempts = max(int(max_retries), 1)
    base = max(base_delay_seconds, 0.1)
    backoff = sum(base * (2 ** attempt) for attempt in range(attempts - 1))
    return timeout_seconds * attempts + backoff


TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN")

DATA_DIR = Path(os.getenv("DATA_DIR") or Path(__file__).resolve().parents[1] / "data")

TMDB_API_KEY = os.getenv("TMDB_API_KEY", "")
TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
TMDB_TIMEOUT_SECONDS = _get_float("TMDB_TIMEOUT_SECONDS", 5.0)

OMDB_API_KEY = os.getenv("OMDB_API_KEY", "")
OMDB_BASE_URL = os.getenv("OMDB_BASE_URL", "https://www.omdbapi.com/")
OMDB_TIMEOUT_SECONDS = _get_float("OMDB_TIMEOUT_SECONDS", 5.0)

EXTERNAL_API_MAX_RETRIES = _get_int("EXTERNAL_API_MAX_RETRIES", 2)
EXTERNAL_API_RETRY_BASE_DELAY_SECONDS = _get_float("EXTERNAL_API_RETRY_BASE_DELAY_SECONDS", 1.0)

RATINGS_CACHE_TTL_SECONDS = _get_float("RATINGS_CACHE_TTL_HOURS", 24.0) * 60 * 60
RATINGS_MAX_CONCURRENT = max(1, min(8, _get_int("RATINGS_MAX_CONCURRENT", 3)))
RATINGS_FETCH_DELAY_SECONDS = max(0, _get_int("RATINGS_FETCH_DELAY_MS", 250)) / 1000.0
RATINGS_LOOKUP_TIMEOUT_SECONDS = _get_float(
    "RATINGS_LOOKUP_TIMEOUT_SECONDS",
    request_budget_seconds(
        max(TMDB_TIMEOUT_SECONDS, OMDB_TIMEOUT_SECONDS),
        EXTERNAL_API_MAX_RETRIES,
        EXTERNAL_API_RETRY_BASE_DELAY_SECONDS,
    ),
)
RATINGS_ENSURE_LIMIT = max(0, _get_int("RATINGS_ENSURE_LIMIT", 10))

ACCOUNT_ID = os.getenv("ACCOUNT_ID", "local")

GOOGLE_CREDENTIALS = os.getenv("GOOGLE_CREDENTIALS")
GOOGLE_SHEET_NAME = os.getenv("GOOGLE_SHEET_NAME")
CLOUD_WORKSHEET_NAME = os.getenv("CLOUD_WORKSHEET_NAME", "user_caches")
CLOUD_SYNC_ENABLED = _get_bool("CLOUD_SYNC_ENABLED")
CLOUD_MERGE_DELAY_SECONDS = _get_float("CLOUD_MERGE_DELAY_SECONDS", 1.2)
CLOUD_UPLOAD_DEBOUNCE_SECONDS = _get_float("CLOUD_UPLOAD_DEBOUNCE_SECONDS", 2.2)
