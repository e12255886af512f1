# Overview: Fixed role -> permission allow-lists.

ROLE_PERMISSIONS = {
    "sales": {
        "VIEW_PRODUCTS",
        "MANAGE_PRODUCTS",
        "VIEW_SALES",
        "RECORD_SALES",
        "VIEW_QUERIES",
        "RESPOND_QUERIES",
    },
    "finance": {
        "VIEW_SALES",
        "VIEW_INCOME",
        "MANAGE_INCOME",
    },
    "developer": {
        "VIEW_PRODUCTS",
        "MANAGE_PRODUCTS",
        "VIEW_SALES",
        "RECORD_SALES",
        "VIEW_INCOME",
        "MANAGE_INCOME",
        "VIEW_QUERIES",
        "RESPOND_QUERIES",
        "MANAGE_USERS",
        "MANAGE_BACKUPS",
        "BROWSE_FILES",
    },
    "investor": {
        "VIEW_INCOME",
    },
    "iwc_partner": {
        "VIEW_PRODUCTS",
        "VIEW_SALES",
        "VIEW_INCOME",
    },
}


def roles_with_permission(code: str) -> list[str]:
    """Roles whose allow-list contains code, in declaration order."""
    return [role for role, codes in ROLE_PERMISSIONS.items() if code in codes]
