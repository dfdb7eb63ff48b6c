"""
flaskbase - Database access.

Chainable query builder over /db/{collection} plus app-level read helpers.
"""

from flaskbase.db.query import DeleteBuilder, PendingResult, QueryBuilder, RequestState

__all__ = [
    "QueryBuilder",
    "DeleteBuilder",
    "PendingResult",
    "RequestState",
]
