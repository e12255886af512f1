# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "VIEW_PRODUCTS",
        "View Products",
        "View the product and service catalog",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_PRODUCTS",
        "Manage Products",
        "Add products and services to the catalog",
        PermissionCategory.CATALOG,
    ),
]


# -- SALES --

SALES_PERMISSIONS = [
    (
        "VIEW_SALES",
        "View Sales",
        "View recorded sales",
        PermissionCategory.SALES,
    ),
    (
        "RECORD_SALES",
        "Record Sales",
        "Record new sales",
        PermissionCategory.SALES,
    ),
]


# -- FINANCE --

FINANCE_PERMISSIONS = [
    (
        "VIEW_INCOME",
        "View Income Statements",
        "View monthly income statements",
        PermissionCategory.FINANCE,
    ),
    (
        "MANAGE_INCOME",
        "Manage Income Statements",
        "Submit monthly income statements",
        PermissionCategory.FINANCE,
    ),
]


# -- QUERIES --

QUERY_PERMISSIONS = [
    (
        "VIEW_QUERIES",
        "View Client Queries",
        "View the client query inbox",
        PermissionCategory.QUERIES,
    ),
    (
        "RESPOND_QUERIES",
        "Respond to Client Queries",
        "Answer pending client queries",
        PermissionCategory.QUERIES,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "MANAGE_USERS",
        "Manage Users",
        "List and create portal accounts",
        PermissionCategory.USERS,
    ),
]


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    (
        "MANAGE_BACKUPS",
        "Manage Backups",
        "Create, list and restore database snapshots",
        PermissionCategory.SYSTEM,
    ),
    (
        "BROWSE_FILES",
        "Browse Files",
        "Browse application, database and configuration files",
        PermissionCategory.SYSTEM,
    ),
]


PERMISSION_DEFINITIONS = (
    CATALOG_PERMISSIONS
    + SALES_PERMISSIONS
    + FINANCE_PERMISSIONS
    + QUERY_PERMISSIONS
    + USER_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
