"""
Pytest fixtures for IWB Vault backend tests.

Provides an app per test (in-memory SQLite, temporary backup directory),
a memory-backend variant, one user per role, and auth header helpers.
"""

import pytest
from vault import create_app
from vault.extensions import db
from vault.models import USER_ROLES
from vault.services.auth_service import register_user
from vault.storage import get_storage


PASSWORD = "Password123"


def _build_app(tmp_path, **overrides):
    config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORAGE_BACKEND': 'database',
        'BACKUP_DIR': str(tmp_path / "backups"),
        'BACKUP_SCHEDULE_ENABLED': False,
        'BCRYPT_ROUNDS': 4,
    }
    config.update(overrides)
    return create_app(config)


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing (SQLAlchemy storage)."""
    app = _build_app(tmp_path)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def mem_app(tmp_path):
    """Create application backed by MemStorage."""
    app = _build_app(tmp_path, STORAGE_BACKEND='memory')

    with app.app_context():
        yield app


@pytest.fixture(scope='function', params=['database', 'memory'])
def any_app(request, tmp_path):
    """Runs the test once per storage backend."""
    app = _build_app(tmp_path, STORAGE_BACKEND=request.param)

    with app.app_context():
        if request.param == 'database':
            db.create_all()
        yield app
        if request.param == 'database':
            db.session.remove()
            db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


def make_user(role: str, username: str | None = None) -> dict:
    """Create a user through the service layer (needs an app context)."""
    username = username or f"{role}_user"
    return register_user({
        "username": username,
        "password": PASSWORD,
        "full_name": f"{role.title()} User",
        "email": f"{username}@iwb.test",
        "role": role,
    })


@pytest.fixture(scope='function')
def user_factory():
    """make_user for tests that build their own app (e.g. any_app)."""
    return make_user


@pytest.fixture(scope='function')
def users(app):
    """One user per role, keyed by role."""
    return {role: make_user(role) for role in USER_ROLES}


def get_auth_token(client, username: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def headers_for(client, users):
    """headers_for("sales") -> Authorization headers for that role's user."""
    cache = {}

    def _headers(role: str) -> dict:
        if role not in cache:
            cache[role] = auth_headers(get_auth_token(client, users[role]["username"]))
        return cache[role]

    return _headers


@pytest.fixture(scope='function')
def sales_headers(headers_for):
    return headers_for("sales")


@pytest.fixture(scope='function')
def finance_headers(headers_for):
    return headers_for("finance")


@pytest.fixture(scope='function')
def developer_headers(headers_for):
    return headers_for("developer")


@pytest.fixture(scope='function')
def product(app):
    return get_storage().create_product({
        "name": "Network Security Suite",
        "description": "Firewall and intrusion detection package",
        "price": 149900,
        "category": "product",
    })
