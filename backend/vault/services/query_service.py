# Overview: Client-query lifecycle; auto-completion on submit and manual responses.

"""
Client Query Lifecycle

STATES:
- pending        created when the classifier has no confident answer
- auto_complete  created when the classifier answered (terminal)
- complete       pending query answered by staff (terminal)

Creation is the only way into pending/auto_complete; respond_to_query is the
only transition after creation (pending -> complete).
"""

from __future__ import annotations

from flask import current_app

from ..storage import get_storage
from ..validation import NotFoundError, validate_client_query
from .nlp_service import get_classifier


STATUS_PENDING = "pending"
STATUS_COMPLETE = "complete"
STATUS_AUTO_COMPLETE = "auto_complete"

TERMINAL_STATUSES = {STATUS_COMPLETE, STATUS_AUTO_COMPLETE}

# Transitions allowed after creation
ALLOWED_TRANSITIONS = {
    STATUS_PENDING: {STATUS_COMPLETE},
    STATUS_COMPLETE: set(),
    STATUS_AUTO_COMPLETE: set(),
}

RESPONDER_ROLES = {"sales", "developer"}


class QueryError(Exception):
    """Base error for query lifecycle operations."""


class QueryValidationError(QueryError):
    """400: bad respond payload."""


class QueryPermissionError(QueryError):
    """403: acting user may not respond."""


class QueryStateError(QueryError):
    """409: transition not allowed from the current status."""


def can_transition(from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def submit_query(payload: dict) -> dict:
    """
    Validate and store a client query, auto-answering it when possible.

    Raises ValidationError for bad payloads.
    """
    patch = validate_client_query(payload)
    answer = get_classifier().generate_response(patch["message"])

    if answer:
        query = get_storage().create_client_query({
            **patch,
            "response": answer,
            "responded_by": None,
            "status": STATUS_AUTO_COMPLETE,
        })
    else:
        query = get_storage().create_client_query({
            **patch,
            "response": None,
            "responded_by": None,
            "status": STATUS_PENDING,
        })

    current_app.logger.info("Client query %s stored as %s", query["id"], query["status"])
    return query


def respond_to_query(query_id: int, response, user: dict) -> dict:
    """
    Manually answer a pending query.

    Raises:
        QueryPermissionError: user role not allowed to respond
        QueryValidationError: response missing or not a string
        NotFoundError: unknown query id
        QueryStateError: query already resolved
    """
    if user.get("role") not in RESPONDER_ROLES:
        raise QueryPermissionError("Forbidden")

    if not response or not isinstance(response, str) or not response.strip():
        raise QueryValidationError("Response is required")

    storage = get_storage()
    query = storage.get_client_query(query_id)
    if not query:
        raise NotFoundError("Query not found")

    if not can_transition(query["status"], STATUS_COMPLETE):
        raise QueryStateError("Query is already resolved")

    updated = storage.update_client_query(query_id, {
        "response": response,
        "status": STATUS_COMPLETE,
        "responded_by": user["id"],
    })
    current_app.logger.info("Client query %s answered by user %s", query_id, user["id"])
    return updated


def list_queries() -> list[dict]:
    return get_storage().list_client_queries()
