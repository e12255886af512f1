# Overview: Flask API routes for income statement operations; parses input and returns JSON responses.

# backend/vault/routes/income.py
from flask import Blueprint, request, jsonify, g

from ..storage import get_storage
from ..validation import validate_income_statement, ValidationError
from ..decorators import require_auth, require_permission


income_bp = Blueprint("income", __name__, url_prefix="/api/income")


@income_bp.get("")
@require_auth
@require_permission("VIEW_INCOME")
def list_income_statements():
    return jsonify(get_storage().list_income_statements())


@income_bp.post("")
@require_auth
@require_permission("MANAGE_INCOME")
def create_income_statement_route():
    """
    Submit a monthly income statement.

    Amounts are integer cents; net_profit may be negative.
    """
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        payload = {**payload, "created_by": g.current_user["id"]}

    try:
        patch = validate_income_statement(payload)
    except ValidationError as e:
        return jsonify({"message": "Invalid income statement data", "errors": e.errors}), 400

    created = get_storage().create_income_statement(patch)
    return jsonify(created), 201
