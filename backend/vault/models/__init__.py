from .auth import User, SessionToken, USER_ROLES
from .catalog import ProductOrService, PRODUCT_CATEGORIES
from .finance import Sale, IncomeStatement
from .queries import ClientQuery, QUERY_STATUSES

__all__ = [
    'User', 'SessionToken', 'USER_ROLES',
    'ProductOrService', 'PRODUCT_CATEGORIES',
    'Sale', 'IncomeStatement',
    'ClientQuery', 'QUERY_STATUSES',
]
