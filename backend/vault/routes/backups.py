# Overview: Flask API routes for snapshot backup and restore; parses input and returns JSON responses.

# backend/vault/routes/backups.py
"""
Backup / restore routes.

SECURITY: Developer only (MANAGE_BACKUPS). Restore accepts only bare
snapshot filenames from GET /api/backups, never paths.
"""
import os

from flask import Blueprint, request, jsonify

from ..services import backup_service
from ..services.backup_service import BackupError, BackupNotFoundError, InvalidBackupNameError
from ..decorators import require_auth, require_permission


backups_bp = Blueprint("backups", __name__, url_prefix="/api")


@backups_bp.post("/backup")
@require_auth
@require_permission("MANAGE_BACKUPS")
def create_backup_route():
    try:
        backup_path = backup_service.create_backup()
    except BackupError as e:
        return jsonify({"message": str(e)}), 500

    return jsonify({
        "message": "Backup created successfully",
        "backup_path": os.path.basename(backup_path),
    }), 200


@backups_bp.get("/backups")
@require_auth
@require_permission("MANAGE_BACKUPS")
def list_backups_route():
    """Snapshot filenames, newest first."""
    return jsonify(backup_service.get_available_backups())


@backups_bp.post("/restore")
@require_auth
@require_permission("MANAGE_BACKUPS")
def restore_backup_route():
    """
    Replace table contents with a snapshot.

    Body: {"backup_file": "backup-<stamp>.json"}

    WHY no transaction: each row commits on its own, so a failure part-way
    leaves a partial restore; the 500 response says so.
    """
    data = request.get_json(silent=True) or {}
    backup_file = data.get("backup_file")

    if not backup_file:
        return jsonify({"message": "Backup file name is required"}), 400

    try:
        backup_path = backup_service.resolve_backup_path(backup_file)
        backup_service.restore_from_backup(backup_path)
    except InvalidBackupNameError as e:
        return jsonify({"message": str(e)}), 400
    except BackupNotFoundError as e:
        return jsonify({"message": str(e)}), 404
    except BackupError as e:
        return jsonify({"message": str(e)}), 500

    return jsonify({"message": "Restored from backup successfully"}), 200
