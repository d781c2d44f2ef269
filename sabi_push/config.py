import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # If DB_URL is not provided, fall back to a local sqlite file for ease of local
    # development (no Postgres needed to try the relay out).
    DB_URL: str = os.getenv("DB_URL") or "sqlite:///./dev.db"

    # Firebase credentials: either a service account JSON file or the three
    # discrete env vars used by serverless deployments. If none are present the
    # push gateway stays unconfigured and webhook sends answer 503.
    FIREBASE_CREDENTIALS_PATH: Optional[str] = os.getenv("FIREBASE_CREDENTIALS_PATH") or None
    FIREBASE_PROJECT_ID: Optional[str] = (os.getenv("FIREBASE_PROJECT_ID") or "").strip() or None
    FIREBASE_CLIENT_EMAIL: Optional[str] = (os.getenv("FIREBASE_CLIENT_EMAIL") or "").strip() or None
    FIREBASE_PRIVATE_KEY: Optional[str] = (os.getenv("FIREBASE_PRIVATE_KEY") or "").strip() or None

    # Maintenance sweep
    STALE_TOKEN_RETENTION_DAYS: int = int(os.getenv("STALE_TOKEN_RETENTION_DAYS") or 30)
    SWEEP_CRON_HOUR: int = int(os.getenv("SWEEP_CRON_HOUR") or 2)
    SWEEP_TIMEZONE: str = os.getenv("SWEEP_TIMEZONE") or "Africa/Lagos"
    ENABLE_SCHEDULER: bool = _env_flag("ENABLE_SCHEDULER", True)

    PROJECT_NAME: str = os.getenv("PROJECT_NAME") or "Sabi Push Relay"
    VERSION: str = os.getenv("VERSION") or "1.0.0"

    HOST: str = os.getenv("HOST") or "0.0.0.0"
    PORT: int = int(os.getenv("PORT") or 8000)


settings = Settings()
