# backend/vault/routes/system.py
"""
System health endpoint.

Checks the configured storage backend and reports scheduler and classifier
state for deployment debugging.
"""

import time
from flask import Blueprint, current_app
from ..storage import get_storage
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_storage_health() -> dict:
    """
    Check storage connectivity with a cheap read.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        storage = get_storage()
        # Single primary-key read; a missing row is still a healthy answer
        storage.get_user(1)

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "backend": current_app.config.get("STORAGE_BACKEND", "database"),
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Storage health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error"
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: storage reachable
    - 503: storage unhealthy
    """
    storage_health = check_storage_health()

    scheduler = current_app.extensions.get("vault.backup_scheduler")
    classifier = current_app.extensions.get("vault.classifier")

    http_status = 200 if storage_health["status"] == "healthy" else 503

    response = {
        "status": storage_health["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {
            "storage": storage_health,
            "classifier": {"status": "ready" if classifier and classifier.initialized else "not_ready"},
            "backup_scheduler": {"status": "running" if scheduler and scheduler.running else "stopped"},
        }
    }

    return response, http_status
