# Overview: Flask API routes for user administration; parses input and returns JSON responses.

# backend/vault/routes/users.py
"""
User administration routes.

SECURITY: Developer only (MANAGE_USERS). Password hashes are stripped from
every response.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..services import auth_service
from ..storage import get_storage
from ..validation import ValidationError
from ..decorators import require_auth, require_permission


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("MANAGE_USERS")
def list_users():
    return jsonify([auth_service.public_user(u) for u in get_storage().list_users()])


@users_bp.post("")
@require_auth
@require_permission("MANAGE_USERS")
def create_user_route():
    """Create an account with any role. Does not open a session for it."""
    payload = request.get_json(silent=True) or {}

    try:
        user = auth_service.register_user(payload)
    except ValidationError as e:
        return jsonify({"message": "Invalid user data", "errors": e.errors}), 400

    current_app.logger.info("User %s created by %s", user["username"], g.current_user["username"])
    return jsonify(auth_service.public_user(user)), 201
