"""Fluent loaders returned by ``UnconstrainedDataManager.load``.

Usage:
    customer = await data_manager.load(Customer).id(customer_id).one()
    page = await (
        data_manager.load(Customer)
        .query("status = :status", status="active")
        .sort(Sort.by("name"))
        .first_result(20)
        .max_results(10)
        .list()
    )
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from datarepo.data.fetch_plan import FetchPlan
from datarepo.data.load_context import LoadContext, Query
from datarepo.data.sort import UNSORTED, Sort
from datarepo.exceptions import EntityNotFoundError

if TYPE_CHECKING:
    from datarepo.data.data_manager import UnconstrainedDataManager

E = TypeVar("E")


class _Loader(Generic[E]):
    def __init__(self, entity_class: type[E], data_manager: UnconstrainedDataManager) -> None:
        self._entity_class = entity_class
        self._data_manager = data_manager
        self._fetch_plan: FetchPlan | str | None = None

    def _create_load_context(self) -> LoadContext:
        metadata = self._data_manager.metadata
        return LoadContext(
            meta_class=metadata.get_class(self._entity_class),
            fetch_plan=metadata.fetch_plans.resolve(self._entity_class, self._fetch_plan),
        )


class FluentLoader(Generic[E]):
    """Entry point choosing how instances are selected."""

    def __init__(self, entity_class: type[E], data_manager: UnconstrainedDataManager) -> None:
        self._entity_class = entity_class
        self._data_manager = data_manager

    def id(self, entity_id: Any) -> ById[E]:
        """Load a single instance by identifier."""
        return ById(self._entity_class, self._data_manager, entity_id)

    def ids(self, ids: Iterable[Any]) -> ByIds[E]:
        """Load instances by a collection of identifiers."""
        return ByIds(self._entity_class, self._data_manager, list(ids))

    def all(self) -> ByCondition[E]:
        """Load all instances."""
        return ByCondition(self._entity_class, self._data_manager)

    def query(self, query_string: str, **parameters: Any) -> ByCondition[E]:
        """Load instances matching a SQL condition with ``:name`` placeholders."""
        return ByCondition(self._entity_class, self._data_manager, query_string, parameters)


class ById(_Loader[E]):
    """Loader of a single instance by identifier."""

    def __init__(
        self,
        entity_class: type[E],
        data_manager: UnconstrainedDataManager,
        entity_id: Any,
    ) -> None:
        super().__init__(entity_class, data_manager)
        self._id = entity_id

    def fetch_plan(self, fetch_plan: FetchPlan | str | None) -> ById[E]:
        self._fetch_plan = fetch_plan
        return self

    async def optional(self) -> E | None:
        """Load the instance, returning ``None`` if it does not exist."""
        context = self._create_load_context().set_id(self._id)
        return await self._data_manager.load_one(context)

    async def one(self) -> E:
        """Load the instance.

        Raises:
            EntityNotFoundError: If no instance with the identifier exists
        """
        entity = await self.optional()
        if entity is None:
            raise EntityNotFoundError(self._entity_class.__name__, self._id)
        return entity


class ByIds(_Loader[E]):
    """Loader of several instances by identifiers."""

    def __init__(
        self,
        entity_class: type[E],
        data_manager: UnconstrainedDataManager,
        ids: list[Any],
    ) -> None:
        super().__init__(entity_class, data_manager)
        self._ids = ids
        self._sort: Sort = UNSORTED

    def fetch_plan(self, fetch_plan: FetchPlan | str | None) -> ByIds[E]:
        self._fetch_plan = fetch_plan
        return self

    def sort(self, sort: Sort) -> ByIds[E]:
        self._sort = sort
        return self

    async def list(self) -> list[E]:
        """Load instances; without a sort they follow the order of the identifiers."""
        context = self._create_load_context().set_ids(self._ids)
        context.set_query(Query(sort=self._sort))
        return await self._data_manager.load_list(context)


class ByCondition(_Loader[E]):
    """Loader of instances matching an optional condition."""

    def __init__(
        self,
        entity_class: type[E],
        data_manager: UnconstrainedDataManager,
        query_string: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(entity_class, data_manager)
        self._query = Query(query_string=query_string, parameters=dict(parameters or {}))

    def fetch_plan(self, fetch_plan: FetchPlan | str | None) -> ByCondition[E]:
        self._fetch_plan = fetch_plan
        return self

    def sort(self, sort: Sort) -> ByCondition[E]:
        self._query.set_sort(sort)
        return self

    def parameter(self, name: str, value: Any) -> ByCondition[E]:
        self._query.set_parameter(name, value)
        return self

    def parameters(self, parameters: dict[str, Any]) -> ByCondition[E]:
        self._query.set_parameters(parameters)
        return self

    def first_result(self, first_result: int) -> ByCondition[E]:
        self._query.set_first_result(first_result)
        return self

    def max_results(self, max_results: int) -> ByCondition[E]:
        self._query.set_max_results(max_results)
        return self

    def load_context(self) -> LoadContext:
        """Build the load context this loader would execute."""
        return self._create_load_context().set_query(self._query)

    async def list(self) -> list[E]:
        return await self._data_manager.load_list(self.load_context())

    async def optional(self) -> E | None:
        return await self._data_manager.load_one(self.load_context())

    async def one(self) -> E:
        """Load exactly one instance.

        Raises:
            EntityNotFoundError: If nothing matches
        """
        entity = await self.optional()
        if entity is None:
            raise EntityNotFoundError(
                self._entity_class.__name__,
                query=self._query.query_string,
            )
        return entity


__all__ = ["ById", "ByCondition", "ByIds", "FluentLoader"]
