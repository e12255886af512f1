# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    CATALOG_PERMISSIONS,
    SALES_PERMISSIONS,
    FINANCE_PERMISSIONS,
    QUERY_PERMISSIONS,
    USER_PERMISSIONS,
    SYSTEM_PERMISSIONS,
)
from .roles import ROLE_PERMISSIONS, roles_with_permission
from .helpers import (
    get_all_permission_codes,
    validate_permission_code,
    get_role_permissions,
    role_has_permission,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "CATALOG_PERMISSIONS",
    "SALES_PERMISSIONS",
    "FINANCE_PERMISSIONS",
    "QUERY_PERMISSIONS",
    "USER_PERMISSIONS",
    "SYSTEM_PERMISSIONS",
    "ROLE_PERMISSIONS",
    "roles_with_permission",
    "get_all_permission_codes",
    "validate_permission_code",
    "get_role_permissions",
    "role_has_permission",
]
