# Overview: Flask API routes for client query operations; parses input and returns JSON responses.

# backend/vault/routes/queries.py
"""
Client query inbox.

POST /api/queries is public: clients submit questions without an account.
Everything else requires staff authentication.
"""
from flask import Blueprint, request, jsonify, g

from ..services import query_service
from ..services.query_service import QueryPermissionError, QueryStateError, QueryValidationError
from ..validation import NotFoundError, ValidationError
from ..decorators import require_auth, require_permission


queries_bp = Blueprint("queries", __name__, url_prefix="/api/queries")


@queries_bp.get("")
@require_auth
@require_permission("VIEW_QUERIES")
def list_queries():
    return jsonify(query_service.list_queries())


@queries_bp.post("")
def submit_query_route():
    """
    Submit a client query.

    The query comes back auto_complete with a canned answer when the intent
    classifier is confident, otherwise pending with no response.
    """
    payload = request.get_json(silent=True) or {}

    try:
        created = query_service.submit_query(payload)
    except ValidationError as e:
        return jsonify({"message": "Invalid query data", "errors": e.errors}), 400

    return jsonify(created), 201


@queries_bp.post("/<int:query_id>/respond")
@require_auth
@require_permission("RESPOND_QUERIES")
def respond_to_query_route(query_id: int):
    """
    Answer a pending query (pending -> complete).

    Returns:
    - 200: updated query
    - 400: missing response
    - 403: role may not respond
    - 404: unknown query
    - 409: query already resolved
    """
    data = request.get_json(silent=True) or {}

    try:
        updated = query_service.respond_to_query(query_id, data.get("response"), g.current_user)
    except QueryPermissionError:
        return jsonify({"message": "Forbidden"}), 403
    except QueryValidationError as e:
        return jsonify({"message": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"message": str(e)}), 404
    except QueryStateError as e:
        return jsonify({"message": str(e)}), 409

    return jsonify(updated), 200
