"""Repository adapter over an async SQLAlchemy data manager.

Modules:
    - data: Data managers, fluent loaders, fetch plans, metadata, access constraints
    - repositories: Repository interface, paging/sorting types, adapter and query methods
    - infrastructure: Async engine and session factory
    - config: Settings loaded from DATAREPO_* environment variables
"""

from datarepo.data import DataManager, UnconstrainedDataManager
from datarepo.repositories import (
    DataRepository,
    DataRepositoryFactory,
    Page,
    PageRequest,
    Pageable,
    Sort,
    apply_constraints,
    fetch_plan,
    query,
)

__version__ = "0.1.0"
__all__ = [
    "DataManager",
    "DataRepository",
    "DataRepositoryFactory",
    "Page",
    "PageRequest",
    "Pageable",
    "Sort",
    "UnconstrainedDataManager",
    "apply_constraints",
    "fetch_plan",
    "query",
]
