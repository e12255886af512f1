# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/vault/routes/products.py
"""
Product and service catalog routes.

SECURITY: All routes require authentication.
- Read operations require VIEW_PRODUCTS permission
- Write operations require MANAGE_PRODUCTS permission
"""
from flask import Blueprint, request, jsonify

from ..storage import get_storage
from ..validation import validate_product, ValidationError
from ..decorators import require_auth, require_permission


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products():
    """List the whole catalog, ordered by id."""
    return jsonify(get_storage().list_products())


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """
    Add a product or service.

    price is an integer number of cents.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_product(payload)
    except ValidationError as e:
        return jsonify({"message": "Invalid product data", "errors": e.errors}), 400

    created = get_storage().create_product(patch)
    return jsonify(created), 201
