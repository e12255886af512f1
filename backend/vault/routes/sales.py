# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/vault/routes/sales.py
"""
Sales recording routes.

The acting user is always recorded as created_by; a value sent by the
client is overwritten.
"""
from flask import Blueprint, request, jsonify, g

from ..storage import get_storage
from ..validation import validate_sale, ValidationError
from ..decorators import require_auth, require_permission


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@require_auth
@require_permission("VIEW_SALES")
def list_sales():
    return jsonify(get_storage().list_sales())


@sales_bp.post("")
@require_auth
@require_permission("RECORD_SALES")
def create_sale_route():
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        payload = {**payload, "created_by": g.current_user["id"]}

    try:
        patch = validate_sale(payload)
    except ValidationError as e:
        return jsonify({"message": "Invalid sale data", "errors": e.errors}), 400

    storage = get_storage()
    if not storage.get_product(patch["product_id"]):
        return jsonify({
            "message": "Invalid sale data",
            "errors": [{"field": "product_id", "message": "Product not found"}],
        }), 400

    created = storage.create_sale(patch)
    return jsonify(created), 201
