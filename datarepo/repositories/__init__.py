"""Repository layer.

Provides the generic repository interface, the paging and sorting types
passed to it, and the adapter that implements it on top of a data manager.
"""

from datarepo.repositories.annotations import apply_constraints, fetch_plan, query
from datarepo.repositories.base import DataRepository
from datarepo.repositories.domain import (
    Direction,
    Order,
    Page,
    Pageable,
    PageRequest,
    Sort,
)
from datarepo.repositories.queries.abstract_query import AbstractQuery, QueryMethod
from datarepo.repositories.queries.declared_query import DeclaredQuery
from datarepo.repositories.support.factory import DataRepositoryFactory
from datarepo.repositories.support.method_metadata import (
    CrudMethodMetadata,
    CrudMethodMetadataAccessor,
)
from datarepo.repositories.support.repository_impl import DataRepositoryImpl
from datarepo.repositories.support.repository_metadata import RepositoryMetadata

__all__ = [
    # Interface
    "DataRepository",
    "apply_constraints",
    "fetch_plan",
    "query",
    # Paging and sorting
    "Direction",
    "Order",
    "Page",
    "PageRequest",
    "Pageable",
    "Sort",
    # Support
    "CrudMethodMetadata",
    "CrudMethodMetadataAccessor",
    "DataRepositoryFactory",
    "DataRepositoryImpl",
    "RepositoryMetadata",
    # Queries
    "AbstractQuery",
    "DeclaredQuery",
    "QueryMethod",
]
