"""Fetch plans.

A fetch plan names the attributes and related entities that should be
loaded together with an entity. Plans are translated into SQLAlchemy
loader options when a query is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import load_only, selectinload
from sqlalchemy.orm.interfaces import LoaderOption

from datarepo.exceptions import MetadataError

# Built-in plan names
LOCAL = "_local"
BASE = "_base"
INSTANCE_NAME = "_instance_name"

BUILT_IN_PLANS = (LOCAL, BASE, INSTANCE_NAME)


@dataclass
class FetchPlan:
    """A fetch plan for one entity class.

    Attributes:
        entity_class: Mapped class the plan applies to
        name: Plan name used for lookups
        properties: Property name to nested plan (``None`` for plain attributes)
        extends_local: Whether all local attributes are loaded in addition
            to the listed properties
    """

    entity_class: type
    name: str = ""
    properties: dict[str, FetchPlan | None] = field(default_factory=dict)
    extends_local: bool = True

    def add(self, property_name: str, nested: FetchPlan | None = None) -> FetchPlan:
        """Add a property (or a related entity with its own plan)."""
        self.properties[property_name] = nested
        return self

    def loader_options(self) -> list[LoaderOption]:
        """Build SQLAlchemy loader options for this plan."""
        mapper = sa_inspect(self.entity_class)
        options: list[LoaderOption] = []
        columns = []

        for property_name, nested in self.properties.items():
            if property_name in mapper.relationships:
                attr = getattr(self.entity_class, property_name)
                loader = selectinload(attr)
                if nested is not None:
                    nested_options = nested.loader_options()
                    if nested_options:
                        loader = loader.options(*nested_options)
                options.append(loader)
            elif property_name in mapper.column_attrs:
                columns.append(getattr(self.entity_class, property_name))
            else:
                raise MetadataError(
                    f"Unknown property '{property_name}' in fetch plan '{self.name}'",
                    entity=self.entity_class.__name__,
                )

        if not self.extends_local and columns:
            options.append(load_only(*columns))
        return options


class FetchPlanRepository:
    """Registry of named fetch plans."""

    def __init__(self) -> None:
        self._plans: dict[tuple[type, str], FetchPlan] = {}

    def register(self, plan: FetchPlan) -> None:
        """Register a named plan for its entity class."""
        if not plan.name:
            raise MetadataError("Only named fetch plans can be registered")
        if plan.name in BUILT_IN_PLANS:
            raise MetadataError(f"Fetch plan name '{plan.name}' is reserved")
        self._plans[(plan.entity_class, plan.name)] = plan

    def find(self, entity_class: type, name: str) -> FetchPlan | None:
        """Find a plan by name, including the built-in plans."""
        if name in (LOCAL, BASE):
            return FetchPlan(entity_class, name)
        if name == INSTANCE_NAME:
            return self._instance_name_plan(entity_class)
        return self._plans.get((entity_class, name))

    def get(self, entity_class: type, name: str) -> FetchPlan:
        """Get a plan by name.

        Raises:
            MetadataError: If no plan with that name exists
        """
        plan = self.find(entity_class, name)
        if plan is None:
            raise MetadataError(
                f"Fetch plan '{name}' not found",
                entity=entity_class.__name__,
            )
        return plan

    def resolve(self, entity_class: type, plan: FetchPlan | str | None) -> FetchPlan | None:
        """Turn a plan or plan name into a plan (``None`` stays ``None``)."""
        if plan is None or isinstance(plan, FetchPlan):
            return plan
        return self.get(entity_class, plan)

    @staticmethod
    def _instance_name_plan(entity_class: type) -> FetchPlan:
        properties: tuple[Any, ...] = getattr(entity_class, "__instance_name__", ())
        if not properties:
            return FetchPlan(entity_class, INSTANCE_NAME)
        plan = FetchPlan(entity_class, INSTANCE_NAME, extends_local=False)
        for property_name in properties:
            plan.add(property_name)
        return plan


__all__ = [
    "BASE",
    "BUILT_IN_PLANS",
    "FetchPlan",
    "FetchPlanRepository",
    "INSTANCE_NAME",
    "LOCAL",
]
