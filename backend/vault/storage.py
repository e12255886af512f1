# Overview: CRUD facade over the portal tables, with a SQLAlchemy and an in-memory implementation.

"""
Storage adapter.

Routes and services never touch db.session directly for the portal tables;
they go through the Storage selected by STORAGE_BACKEND:

- DatabaseStorage: SQLAlchemy models via db.session (production)
- MemStorage: process-local dicts (tests and demos)

Every method returns plain row dicts (datetimes as ISO-8601 "Z" strings),
so both implementations are interchangeable and rows are JSON-ready for
API responses and backup snapshots.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from flask import Flask, current_app
from sqlalchemy import DateTime, text

from .extensions import db
from .models import User, SessionToken, ProductOrService, Sale, IncomeStatement, ClientQuery
from .time_utils import parse_iso_datetime, to_utc_z, utcnow
from .validation import NotFoundError, fits_integer_column


# Order matters: parents before children (foreign keys point backwards)
BACKUP_TABLES = ("users", "products_services", "sales", "income_statements", "client_queries")

TABLE_MODELS = {
    "users": User,
    "products_services": ProductOrService,
    "sales": Sale,
    "income_statements": IncomeStatement,
    "client_queries": ClientQuery,
}

_EXTENSION_KEY = "vault.storage"


class UnknownTableError(KeyError):
    """Raised for table names outside BACKUP_TABLES."""


def _model_for(table: str):
    try:
        return TABLE_MODELS[table]
    except KeyError:
        raise UnknownTableError(table)


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_utc_z(value)
    return value


def row_to_columns(model, row: dict) -> dict:
    """
    Map a dumped row back onto model columns.

    Unknown keys are dropped; ISO strings in DateTime columns are parsed.
    """
    values = {}
    for col in model.__table__.columns:
        if col.key not in row:
            continue
        value = row[col.key]
        if isinstance(col.type, DateTime) and isinstance(value, str):
            value = parse_iso_datetime(value)
        values[col.key] = value
    return values


class Storage(ABC):
    """
    Interface shared by DatabaseStorage and MemStorage.

    One method group per entity plus the table-level hooks used by the
    backup utility (dump_table / clear_table / insert_row / reset_sequence).
    """

    # Users
    @abstractmethod
    def get_user(self, user_id: int) -> dict | None:
        ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> dict | None:
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> dict | None:
        ...

    @abstractmethod
    def create_user(self, data: dict) -> dict:
        ...

    @abstractmethod
    def list_users(self) -> list[dict]:
        ...

    # Products and services
    @abstractmethod
    def get_product(self, product_id: int) -> dict | None:
        ...

    @abstractmethod
    def list_products(self) -> list[dict]:
        ...

    @abstractmethod
    def create_product(self, data: dict) -> dict:
        ...

    # Sales
    @abstractmethod
    def get_sale(self, sale_id: int) -> dict | None:
        ...

    @abstractmethod
    def list_sales(self) -> list[dict]:
        ...

    @abstractmethod
    def create_sale(self, data: dict) -> dict:
        ...

    # Income statements
    @abstractmethod
    def get_income_statement(self, statement_id: int) -> dict | None:
        ...

    @abstractmethod
    def list_income_statements(self) -> list[dict]:
        ...

    @abstractmethod
    def create_income_statement(self, data: dict) -> dict:
        ...

    # Client queries
    @abstractmethod
    def get_client_query(self, query_id: int) -> dict | None:
        ...

    @abstractmethod
    def list_client_queries(self) -> list[dict]:
        ...

    @abstractmethod
    def create_client_query(self, data: dict) -> dict:
        ...

    @abstractmethod
    def update_client_query(self, query_id: int, updates: dict) -> dict:
        ...

    # Session tokens
    @abstractmethod
    def create_session_token(self, data: dict) -> dict:
        ...

    @abstractmethod
    def get_session_token(self, token_hash: str) -> dict | None:
        ...

    @abstractmethod
    def update_session_token(self, session_id: int, updates: dict) -> dict:
        ...

    @abstractmethod
    def list_session_tokens(self, user_id: int) -> list[dict]:
        ...

    # Table-level hooks (backup/restore)
    @abstractmethod
    def dump_table(self, table: str) -> list[dict]:
        ...

    @abstractmethod
    def clear_table(self, table: str) -> int:
        ...

    @abstractmethod
    def insert_row(self, table: str, row: dict) -> None:
        ...

    def reset_sequence(self, table: str) -> None:
        """Keep id generation ahead of restored ids. No-op by default."""


class DatabaseStorage(Storage):
    """SQLAlchemy-backed storage. Each write commits on its own."""

    def _get(self, model, pk: int) -> dict | None:
        # Ids the column cannot hold cannot exist
        if not fits_integer_column(pk):
            return None
        obj = db.session.get(model, pk)
        return obj.to_dict() if obj else None

    def _list(self, model) -> list[dict]:
        return [o.to_dict() for o in db.session.query(model).order_by(model.id.asc()).all()]

    def _create(self, model, data: dict) -> dict:
        obj = model(**data)
        db.session.add(obj)
        db.session.commit()
        return obj.to_dict()

    # Users
    def get_user(self, user_id: int) -> dict | None:
        return self._get(User, user_id)

    def get_user_by_username(self, username: str) -> dict | None:
        user = db.session.query(User).filter_by(username=username).first()
        return user.to_dict() if user else None

    def get_user_by_email(self, email: str) -> dict | None:
        user = db.session.query(User).filter_by(email=email).first()
        return user.to_dict() if user else None

    def create_user(self, data: dict) -> dict:
        return self._create(User, data)

    def list_users(self) -> list[dict]:
        return self._list(User)

    # Products and services
    def get_product(self, product_id: int) -> dict | None:
        return self._get(ProductOrService, product_id)

    def list_products(self) -> list[dict]:
        return self._list(ProductOrService)

    def create_product(self, data: dict) -> dict:
        return self._create(ProductOrService, data)

    # Sales
    def get_sale(self, sale_id: int) -> dict | None:
        return self._get(Sale, sale_id)

    def list_sales(self) -> list[dict]:
        return self._list(Sale)

    def create_sale(self, data: dict) -> dict:
        return self._create(Sale, data)

    # Income statements
    def get_income_statement(self, statement_id: int) -> dict | None:
        return self._get(IncomeStatement, statement_id)

    def list_income_statements(self) -> list[dict]:
        return self._list(IncomeStatement)

    def create_income_statement(self, data: dict) -> dict:
        return self._create(IncomeStatement, data)

    # Client queries
    def get_client_query(self, query_id: int) -> dict | None:
        return self._get(ClientQuery, query_id)

    def list_client_queries(self) -> list[dict]:
        return self._list(ClientQuery)

    def create_client_query(self, data: dict) -> dict:
        return self._create(ClientQuery, data)

    def update_client_query(self, query_id: int, updates: dict) -> dict:
        query = db.session.get(ClientQuery, query_id) if fits_integer_column(query_id) else None
        if not query:
            raise NotFoundError("Query not found")
        for k, v in updates.items():
            if k in ("id", "created_at", "updated_at"):
                continue
            setattr(query, k, v)
        query.updated_at = utcnow()
        db.session.commit()
        return query.to_dict()

    # Session tokens
    def create_session_token(self, data: dict) -> dict:
        return self._create(SessionToken, data)

    def get_session_token(self, token_hash: str) -> dict | None:
        session = db.session.query(SessionToken).filter_by(token_hash=token_hash).first()
        return session.to_dict() if session else None

    def update_session_token(self, session_id: int, updates: dict) -> dict:
        session = db.session.get(SessionToken, session_id) if fits_integer_column(session_id) else None
        if not session:
            raise NotFoundError("Session not found")
        for k, v in updates.items():
            setattr(session, k, v)
        db.session.commit()
        return session.to_dict()

    def list_session_tokens(self, user_id: int) -> list[dict]:
        sessions = (
            db.session.query(SessionToken)
            .filter_by(user_id=user_id)
            .order_by(SessionToken.id.asc())
            .all()
        )
        return [s.to_dict() for s in sessions]

    # Table-level hooks
    def dump_table(self, table: str) -> list[dict]:
        return self._list(_model_for(table))

    def clear_table(self, table: str) -> int:
        deleted = db.session.query(_model_for(table)).delete()
        db.session.commit()
        return deleted

    def insert_row(self, table: str, row: dict) -> None:
        model = _model_for(table)
        db.session.add(model(**row_to_columns(model, row)))
        db.session.commit()

    def reset_sequence(self, table: str) -> None:
        # SQLite AUTOINCREMENT already tracks max(id); Postgres serials do not
        if db.engine.dialect.name != "postgresql":
            return
        name = _model_for(table).__tablename__
        db.session.execute(text(
            f"SELECT setval(pg_get_serial_sequence('{name}', 'id'), "
            f"COALESCE((SELECT MAX(id) FROM {name}), 0) + 1, false)"
        ))
        db.session.commit()


class MemStorage(Storage):
    """
    Process-local storage for tests and demos.

    Rows have exactly the shape DatabaseStorage returns, so snapshots taken
    from one backend restore into the other.
    """

    def __init__(self):
        self._tables: dict[str, dict[int, dict]] = {name: {} for name in BACKUP_TABLES}
        self._sessions: dict[int, dict] = {}
        self._next_ids: dict[str, int] = {name: 1 for name in BACKUP_TABLES}
        self._next_session_id = 1

    @staticmethod
    def _blank_row(model) -> dict:
        row = {}
        for col in model.__table__.columns:
            row[col.key] = None
        return row

    def _insert(self, table: str, data: dict) -> dict:
        model = _model_for(table)
        now = to_utc_z(utcnow())
        row = self._blank_row(model)
        for key in ("created_at", "updated_at", "date"):
            if key in row:
                row[key] = now
        if table == "client_queries":
            row["status"] = "pending"
        for k, v in data.items():
            if k in row and k != "id":
                row[k] = _serialize(v)
        row["id"] = self._next_ids[table]
        self._next_ids[table] += 1
        self._tables[table][row["id"]] = row
        return dict(row)

    def _get(self, table: str, pk: int) -> dict | None:
        row = self._tables[table].get(pk)
        return dict(row) if row else None

    def _list(self, table: str) -> list[dict]:
        rows = self._tables[table]
        return [dict(rows[k]) for k in sorted(rows)]

    def _find(self, table: str, key: str, value) -> dict | None:
        for row in self._tables[table].values():
            if row[key] == value:
                return dict(row)
        return None

    # Users
    def get_user(self, user_id: int) -> dict | None:
        return self._get("users", user_id)

    def get_user_by_username(self, username: str) -> dict | None:
        return self._find("users", "username", username)

    def get_user_by_email(self, email: str) -> dict | None:
        return self._find("users", "email", email)

    def create_user(self, data: dict) -> dict:
        return self._insert("users", data)

    def list_users(self) -> list[dict]:
        return self._list("users")

    # Products and services
    def get_product(self, product_id: int) -> dict | None:
        return self._get("products_services", product_id)

    def list_products(self) -> list[dict]:
        return self._list("products_services")

    def create_product(self, data: dict) -> dict:
        return self._insert("products_services", data)

    # Sales
    def get_sale(self, sale_id: int) -> dict | None:
        return self._get("sales", sale_id)

    def list_sales(self) -> list[dict]:
        return self._list("sales")

    def create_sale(self, data: dict) -> dict:
        return self._insert("sales", data)

    # Income statements
    def get_income_statement(self, statement_id: int) -> dict | None:
        return self._get("income_statements", statement_id)

    def list_income_statements(self) -> list[dict]:
        return self._list("income_statements")

    def create_income_statement(self, data: dict) -> dict:
        return self._insert("income_statements", data)

    # Client queries
    def get_client_query(self, query_id: int) -> dict | None:
        return self._get("client_queries", query_id)

    def list_client_queries(self) -> list[dict]:
        return self._list("client_queries")

    def create_client_query(self, data: dict) -> dict:
        return self._insert("client_queries", data)

    def update_client_query(self, query_id: int, updates: dict) -> dict:
        row = self._tables["client_queries"].get(query_id)
        if not row:
            raise NotFoundError("Query not found")
        for k, v in updates.items():
            if k in row and k not in ("id", "created_at", "updated_at"):
                row[k] = _serialize(v)
        row["updated_at"] = to_utc_z(utcnow())
        return dict(row)

    # Session tokens
    def create_session_token(self, data: dict) -> dict:
        row = self._blank_row(SessionToken)
        row["is_revoked"] = False
        for k, v in data.items():
            if k in row and k != "id":
                row[k] = _serialize(v)
        row["id"] = self._next_session_id
        self._next_session_id += 1
        self._sessions[row["id"]] = row
        return dict(row)

    def get_session_token(self, token_hash: str) -> dict | None:
        for row in self._sessions.values():
            if row["token_hash"] == token_hash:
                return dict(row)
        return None

    def update_session_token(self, session_id: int, updates: dict) -> dict:
        row = self._sessions.get(session_id)
        if not row:
            raise NotFoundError("Session not found")
        for k, v in updates.items():
            if k in row:
                row[k] = _serialize(v)
        return dict(row)

    def list_session_tokens(self, user_id: int) -> list[dict]:
        return [dict(self._sessions[k]) for k in sorted(self._sessions) if self._sessions[k]["user_id"] == user_id]

    # Table-level hooks
    def dump_table(self, table: str) -> list[dict]:
        _model_for(table)
        return self._list(table)

    def clear_table(self, table: str) -> int:
        _model_for(table)
        deleted = len(self._tables[table])
        self._tables[table].clear()
        return deleted

    def insert_row(self, table: str, row: dict) -> None:
        model = _model_for(table)
        values = self._blank_row(model)
        for k in values:
            if k in row:
                values[k] = _serialize(row[k])
        if values["id"] is None:
            values["id"] = self._next_ids[table]
        self._tables[table][values["id"]] = values
        self._next_ids[table] = max(self._next_ids[table], values["id"] + 1)


def build_storage(backend: str) -> Storage:
    if backend == "database":
        return DatabaseStorage()
    if backend == "memory":
        return MemStorage()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


def init_storage(app: Flask) -> Storage:
    storage = build_storage(app.config.get("STORAGE_BACKEND", "database"))
    app.extensions[_EXTENSION_KEY] = storage
    return storage


def get_storage() -> Storage:
    """Storage bound to the current app."""
    return current_app.extensions[_EXTENSION_KEY]
