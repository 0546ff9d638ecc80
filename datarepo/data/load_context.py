"""Load context passed from loaders to the data manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from datarepo.data.fetch_plan import FetchPlan
from datarepo.data.metadata import MetaClass
from datarepo.data.sort import UNSORTED, Sort


@dataclass
class Query:
    """Query part of a load context.

    Attributes:
        query_string: SQL ``WHERE`` condition with ``:name`` placeholders,
            or ``None`` to select all instances
        parameters: Values for the named placeholders
        first_result: Number of rows to skip
        max_results: Maximum number of rows, 0 for no limit
        sort: Sort applied to the result
    """

    query_string: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    first_result: int = 0
    max_results: int = 0
    sort: Sort = UNSORTED

    def set_parameter(self, name: str, value: Any) -> Query:
        self.parameters[name] = value
        return self

    def set_parameters(self, parameters: dict[str, Any]) -> Query:
        self.parameters.update(parameters)
        return self

    def set_first_result(self, first_result: int) -> Query:
        self.first_result = first_result
        return self

    def set_max_results(self, max_results: int) -> Query:
        self.max_results = max_results
        return self

    def set_sort(self, sort: Sort) -> Query:
        self.sort = sort
        return self


@dataclass
class LoadContext:
    """Everything the data manager needs to load instances of one entity."""

    meta_class: MetaClass
    query: Query | None = None
    id: Any = None
    ids: list[Any] = field(default_factory=list)
    fetch_plan: FetchPlan | None = None

    @property
    def entity_class(self) -> type:
        return self.meta_class.entity_class

    def set_query(self, query: Query) -> LoadContext:
        self.query = query
        return self

    def set_id(self, entity_id: Any) -> LoadContext:
        self.id = entity_id
        return self

    def set_ids(self, ids: list[Any]) -> LoadContext:
        self.ids = list(ids)
        return self

    def set_fetch_plan(self, fetch_plan: FetchPlan | None) -> LoadContext:
        self.fetch_plan = fetch_plan
        return self

    def get_or_create_query(self) -> Query:
        if self.query is None:
            self.query = Query()
        return self.query


__all__ = ["LoadContext", "Query"]
