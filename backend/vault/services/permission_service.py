# Overview: Service-layer operations for permission checks against the fixed role allow-lists.

"""
Permission Checking

DESIGN PRINCIPLES:
- Fail closed: unknown roles have no permissions
- Log denials only: grants are not logged
"""

from flask import current_app

from ..permissions import get_role_permissions, role_has_permission, roles_with_permission


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""
    pass


def get_user_permissions(user: dict) -> set[str]:
    return get_role_permissions(user.get("role"))


def has_permission(user: dict, permission_code: str) -> bool:
    return role_has_permission(user.get("role"), permission_code)


def require_permission(user: dict, permission_code: str, resource: str | None = None) -> None:
    """
    Raise PermissionDeniedError unless the user's role grants permission_code.

    Denials are logged with the user, role and resource.
    """
    if has_permission(user, permission_code):
        return

    current_app.logger.warning(
        "Permission denied: user=%s role=%s permission=%s resource=%s",
        user.get("id"), user.get("role"), permission_code, resource,
    )
    allowed = ", ".join(roles_with_permission(permission_code))
    raise PermissionDeniedError(f"Requires one of roles: {allowed}")
