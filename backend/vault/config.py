# backend/vault/config.py
from __future__ import annotations
import os


def _normalize_db_url(url: str | None) -> str | None:
    if not url:
        return None
    u = url.strip()

    # Hosted Postgres providers still hand out postgres:// URLs
    if u.startswith("postgres://"):
        u = u.replace("postgres://", "postgresql+psycopg2://", 1)

    return u


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the process by default
    SQLALCHEMY_DATABASE_URI = (
        _normalize_db_url(os.environ.get("DATABASE_URL"))
        or "sqlite:///vault.sqlite3"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # bcrypt cost factor; tests lower it for speed
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # "database" (SQLAlchemy) or "memory" (process-local dicts, demo/testing)
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "database")

    # Snapshots are written here as backup-<timestamp>.json
    BACKUP_DIR = os.environ.get("BACKUP_DIR", os.path.join(os.getcwd(), "backups"))
    BACKUP_SCHEDULE_ENABLED = _env_flag("BACKUP_SCHEDULE_ENABLED", True)
    BACKUP_INTERVAL_HOURS = float(os.environ.get("BACKUP_INTERVAL_HOURS", "24"))
    BACKUP_RETENTION = int(os.environ.get("BACKUP_RETENTION", "5"))

    # Minimum classifier confidence (exclusive) for auto-completing a query
    NLP_CONFIDENCE_THRESHOLD = float(os.environ.get("NLP_CONFIDENCE_THRESHOLD", "0.7"))

    CORS_ALLOWED_ORIGINS = [
        o.strip()
        for o in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if o.strip()
    ]
