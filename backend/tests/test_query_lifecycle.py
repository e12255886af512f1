"""
Client query lifecycle tests.

Verifies:
- Confident classifications are stored auto_complete with the canned answer
- Everything else is stored pending with no response
- Only sales/developer can respond, only to pending queries
- response is set iff the query is resolved
"""

import pytest

from vault.services import query_service
from vault.services.nlp_service import ANSWERS
from vault.services.query_service import (
    QueryPermissionError,
    QueryStateError,
    QueryValidationError,
    can_transition,
)
from vault.storage import get_storage
from vault.validation import NotFoundError, ValidationError


def _submit(message: str) -> dict:
    return query_service.submit_query({
        "client_name": "Jane Client",
        "client_email": "jane@example.com",
        "message": message,
    })


def _assert_response_invariant():
    for query in get_storage().list_client_queries():
        resolved = query["status"] in {"complete", "auto_complete"}
        assert (query["response"] is not None) == resolved, query


# =============================================================================
# STATE MACHINE
# =============================================================================


class TestTransitions:

    def test_only_pending_to_complete(self):
        assert can_transition("pending", "complete")
        assert not can_transition("pending", "auto_complete")
        assert not can_transition("complete", "pending")
        assert not can_transition("auto_complete", "complete")
        assert not can_transition("complete", "complete")
        assert not can_transition("unknown", "complete")


# =============================================================================
# SUBMISSION
# =============================================================================


class TestSubmitQuery:

    def test_confident_message_is_auto_completed(self, app):
        query = _submit("How much does it cost?")

        assert query["status"] == "auto_complete"
        assert query["response"] == ANSWERS["pricing.inquiry"]
        assert query["responded_by"] is None
        _assert_response_invariant()

    def test_unmatched_message_is_pending(self, app):
        query = _submit("asdkjhasd")

        assert query["status"] == "pending"
        assert query["response"] is None
        assert query["responded_by"] is None
        _assert_response_invariant()

    def test_invalid_payload(self, app):
        with pytest.raises(ValidationError):
            query_service.submit_query({"client_name": "Jane"})
        assert get_storage().list_client_queries() == []

    def test_public_submission_route(self, client):
        resp = client.post("/api/queries", json={
            "client_name": "Jane Client",
            "client_email": "jane@example.com",
            "message": "Contact information",
        })
        assert resp.status_code == 201
        assert resp.json["status"] == "auto_complete"
        assert resp.json["response"] == ANSWERS["contact.inquiry"]

    def test_public_submission_route_validation(self, client):
        resp = client.post("/api/queries", json={"client_name": "Jane", "client_email": "jane@example.com"})
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid query data"
        assert resp.json["errors"] == [{"field": "message", "message": "message is required"}]

        resp = client.post("/api/queries", json={"client_name": "Jane", "client_email": "bad", "message": "Hi"})
        assert resp.status_code == 400
        assert resp.json["errors"] == [{"field": "client_email", "message": "client_email must be a valid email address"}]


# =============================================================================
# RESPONDING
# =============================================================================


class TestRespondToQuery:

    def test_sales_can_respond(self, app, users):
        query = _submit("asdkjhasd")

        updated = query_service.respond_to_query(query["id"], "We will call you", users["sales"])

        assert updated["status"] == "complete"
        assert updated["response"] == "We will call you"
        assert updated["responded_by"] == users["sales"]["id"]
        _assert_response_invariant()

    @pytest.mark.parametrize("role", ["finance", "investor", "iwc_partner"])
    def test_other_roles_cannot_respond(self, app, users, role):
        query = _submit("asdkjhasd")

        with pytest.raises(QueryPermissionError):
            query_service.respond_to_query(query["id"], "Hi", users[role])

        assert get_storage().get_client_query(query["id"]) == query

    @pytest.mark.parametrize("response", [None, "", "   ", 42])
    def test_response_required(self, app, users, response):
        query = _submit("asdkjhasd")
        with pytest.raises(QueryValidationError):
            query_service.respond_to_query(query["id"], response, users["developer"])

    def test_unknown_query(self, app, users):
        with pytest.raises(NotFoundError):
            query_service.respond_to_query(999, "Hi", users["sales"])

    def test_id_beyond_column_range_is_not_found(self, app, users):
        with pytest.raises(NotFoundError):
            query_service.respond_to_query(10 ** 20, "Hi", users["sales"])

    def test_cannot_respond_twice(self, app, users):
        query = _submit("asdkjhasd")
        first = query_service.respond_to_query(query["id"], "First", users["sales"])

        with pytest.raises(QueryStateError):
            query_service.respond_to_query(query["id"], "Second", users["developer"])

        assert get_storage().get_client_query(query["id"]) == first

    def test_cannot_respond_to_auto_completed(self, app, users):
        query = _submit("Technical support")
        assert query["status"] == "auto_complete"

        with pytest.raises(QueryStateError):
            query_service.respond_to_query(query["id"], "Override", users["sales"])

        assert get_storage().get_client_query(query["id"])["response"] == ANSWERS["support.inquiry"]


class TestRespondRoute:

    def test_respond_route(self, client, sales_headers, users):
        query = _submit("asdkjhasd")

        resp = client.post(f"/api/queries/{query['id']}/respond", json={"response": "Sure"}, headers=sales_headers)

        assert resp.status_code == 200
        assert resp.json["status"] == "complete"
        assert resp.json["responded_by"] == users["sales"]["id"]

    def test_respond_route_conflict(self, client, sales_headers):
        query = _submit("Phone number")

        resp = client.post(f"/api/queries/{query['id']}/respond", json={"response": "Sure"}, headers=sales_headers)

        assert resp.status_code == 409
        assert resp.json == {"message": "Query is already resolved"}

    def test_respond_route_forbidden_leaves_query_untouched(self, client, finance_headers):
        query = _submit("asdkjhasd")

        resp = client.post(f"/api/queries/{query['id']}/respond", json={"response": "Sure"}, headers=finance_headers)

        assert resp.status_code == 403
        assert get_storage().get_client_query(query["id"]) == query

    def test_respond_route_not_found(self, client, developer_headers):
        resp = client.post("/api/queries/999/respond", json={"response": "Sure"}, headers=developer_headers)
        assert resp.status_code == 404

    def test_respond_route_oversized_id(self, client, developer_headers):
        resp = client.post(f"/api/queries/{10 ** 20}/respond", json={"response": "Sure"}, headers=developer_headers)

        assert resp.status_code == 404
        assert resp.json == {"message": "Query not found"}

    def test_respond_route_missing_response(self, client, developer_headers):
        query = _submit("asdkjhasd")
        resp = client.post(f"/api/queries/{query['id']}/respond", json={}, headers=developer_headers)
        assert resp.status_code == 400

    def test_list_queries(self, client, sales_headers):
        _submit("asdkjhasd")
        _submit("Pricing information")

        resp = client.get("/api/queries", headers=sales_headers)

        assert resp.status_code == 200
        assert [q["status"] for q in resp.json] == ["pending", "auto_complete"]
