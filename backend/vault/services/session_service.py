# Overview: Service-layer operations for session tokens; issue, validate and revoke bearer sessions.

"""
Session Token Management Service

Secure session management with automatic timeout and revocation.
Tokens are cryptographically secure, hashed in storage, and time-limited.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- 24-hour absolute timeout (SESSION_ABSOLUTE_TIMEOUT)
- 2-hour idle timeout (SESSION_IDLE_TIMEOUT)
- Revocable on logout
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from ..storage import get_storage
from ..time_utils import parse_iso_datetime, utcnow


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)  # Maximum session length
SESSION_IDLE_TIMEOUT = timedelta(hours=2)        # Activity timeout


@dataclass
class SessionContext:
    """Authenticated user plus the session row that proved it."""
    user: dict
    session: dict


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy). Sent to the client, never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 is enough for high-entropy tokens (unlike passwords)."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[dict, str]:
    """
    Create new session token for user.

    Returns (session_row, plaintext_token).
    Client receives plaintext_token, storage keeps only the hash.

    Raises ValueError if the user does not exist.
    """
    storage = get_storage()
    if not storage.get_user(user_id):
        raise ValueError("User not found")

    plaintext_token = generate_token()
    now = utcnow()

    session = storage.create_session_token({
        "user_id": user_id,
        "token_hash": hash_token(plaintext_token),
        "created_at": now,
        "last_used_at": now,
        "expires_at": now + SESSION_ABSOLUTE_TIMEOUT,
        "is_revoked": False,
        "user_agent": user_agent,
        "ip_address": ip_address,
    })

    return session, plaintext_token


def _revoke(session: dict, reason: str) -> None:
    get_storage().update_session_token(session["id"], {
        "is_revoked": True,
        "revoked_at": utcnow(),
        "revoked_reason": reason,
    })


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if:
    - Token is unknown, expired, or revoked
    - The user no longer exists (e.g. removed by a restore)

    Updates last_used_at on successful validation.
    """
    storage = get_storage()
    session = storage.get_session_token(hash_token(token))

    if not session or session["is_revoked"]:
        return None

    now = utcnow()

    if parse_iso_datetime(session["expires_at"]) < now:
        return None

    if now - parse_iso_datetime(session["last_used_at"]) > SESSION_IDLE_TIMEOUT:
        _revoke(session, "Idle timeout")
        return None

    user = storage.get_user(session["user_id"])
    if not user:
        _revoke(session, "User no longer exists")
        return None

    session = storage.update_session_token(session["id"], {"last_used_at": now})

    return SessionContext(user=user, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found or already revoked.
    """
    session = get_storage().get_session_token(hash_token(token))
    if not session or session["is_revoked"]:
        return False

    _revoke(session, reason)
    return True
