# Overview: Flask API routes for the developer file browser; parses input and returns JSON responses.

# backend/vault/routes/files.py
from flask import Blueprint, request, jsonify

from ..services import file_browser_service
from ..services.file_browser_service import UnknownSectionError
from ..decorators import require_auth, require_permission


files_bp = Blueprint("files", __name__, url_prefix="/api/files")


@files_bp.get("")
@require_auth
@require_permission("BROWSE_FILES")
def list_files_route():
    """
    Query params:
    - section: application | database | config (default application)
    - search: case-insensitive name filter (optional)
    """
    section = request.args.get("section", "application")
    search = request.args.get("search")

    try:
        items = file_browser_service.list_files(section, search)
    except UnknownSectionError as e:
        return jsonify({"message": str(e)}), 400

    return jsonify({"section": section, "items": items})
