from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

QUERY_STATUSES = ("pending", "complete", "auto_complete")


class ClientQuery(db.Model):
    """
    Inbound client question.

    LIFECYCLE:
    - created as auto_complete (classifier answered) or pending
    - pending -> complete when staff respond
    - complete and auto_complete are terminal

    response is set iff status is complete or auto_complete;
    responded_by is set only for a manual (complete) response.
    """
    __tablename__ = "client_queries"
    __table_args__ = (
        db.Index("ix_client_queries_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_name = db.Column(db.String(255), nullable=False)
    client_email = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    response = db.Column(db.Text, nullable=True)
    status = db.Column(
        db.Enum(*QUERY_STATUSES, name="status"),
        nullable=False,
        default="pending",
        server_default="pending",
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    responded_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "message": self.message,
            "response": self.response,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "responded_by": self.responded_by,
        }
