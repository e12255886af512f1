# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/vault/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- Password strength validation on registration
- Session management with token-based auth
- Password hashes never leave the service layer
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services import permission_service
from ..validation import ValidationError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _open_session(user: dict) -> str:
    _, token = session_service.create_session(
        user_id=user["id"],
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return token


@auth_bp.post("/register")
def register_route():
    """
    Self-registration. Creates the account and logs it in.

    Returns 201 with the public user and a session token.
    """
    payload = request.get_json(silent=True) or {}

    try:
        user = auth_service.register_user(payload)
    except ValidationError as e:
        return jsonify({"message": "Invalid user data", "errors": e.errors}), 400

    token = _open_session(user)
    return jsonify({"user": auth_service.public_user(user), "token": token}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Accepts "username" or "email" as the identifier.
    Token must be included in Authorization header for protected routes.
    """
    data = request.get_json(silent=True) or {}
    identifier = data.get("username") or data.get("email")
    password = data.get("password")

    if not identifier or not password:
        return jsonify({"message": "username/email and password required"}), 400

    user = auth_service.authenticate(identifier, password)
    if not user:
        current_app.logger.info("Failed login for %s", identifier)
        return jsonify({"message": "Invalid credentials"}), 401

    token = _open_session(user)
    return jsonify({
        "user": auth_service.public_user(user),
        "permissions": sorted(permission_service.get_user_permissions(user)),
        "token": token,
    }), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """
    Revoke the presented session token.

    WHY: Explicit logout prevents token reuse.
    """
    session_service.revoke_session(g.token, reason="User logout")
    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/user")
@require_auth
def current_user_route():
    return jsonify(auth_service.public_user(g.current_user)), 200


@auth_bp.get("/permissions")
@require_auth
def permissions_route():
    """Permission codes for the current user; drives role-aware navigation."""
    return jsonify({
        "role": g.current_user["role"],
        "permissions": sorted(permission_service.get_user_permissions(g.current_user)),
    }), 200
