"""Path query resolution for tag trees.

Key Components:
    QueryResolver: Scans ``root.child~attr`` expressions against a TagTree
    QueryResult: Attribute value or not-found outcome for one expression
    NotFoundReason: Why a query produced no value
"""

from .resolver import NotFoundReason, QueryResolver, QueryResult

__all__ = [
    "NotFoundReason",
    "QueryResolver",
    "QueryResult",
]
