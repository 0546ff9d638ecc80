"""Data access layer.

Loads, counts, saves and removes entities through SQLAlchemy, with or
without the application's access constraints applied.
"""

from datarepo.data.constraints import AccessConstraintsRegistry, EntityOperation
from datarepo.data.data_manager import DataManager, UnconstrainedDataManager
from datarepo.data.fetch_plan import (
    BASE,
    INSTANCE_NAME,
    LOCAL,
    FetchPlan,
    FetchPlanRepository,
)
from datarepo.data.fluent_loader import ByCondition, ById, ByIds, FluentLoader
from datarepo.data.load_context import LoadContext, Query
from datarepo.data.metadata import Id, MetaClass, Metadata
from datarepo.data.sort import UNSORTED, Direction, Order, Sort

__all__ = [
    # Data managers
    "DataManager",
    "UnconstrainedDataManager",
    # Constraints
    "AccessConstraintsRegistry",
    "EntityOperation",
    # Fetch plans
    "BASE",
    "INSTANCE_NAME",
    "LOCAL",
    "FetchPlan",
    "FetchPlanRepository",
    # Loading
    "ByCondition",
    "ById",
    "ByIds",
    "FluentLoader",
    "LoadContext",
    "Query",
    # Metadata
    "Id",
    "MetaClass",
    "Metadata",
    # Sorting
    "Direction",
    "Order",
    "Sort",
    "UNSORTED",
]
