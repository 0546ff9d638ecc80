"""Implementation of the base repository operations.

Every operation delegates to a data manager chosen per call: the
constrained ``DataManager`` when the current CRUD method metadata asks for
access constraints, its unconstrained counterpart otherwise.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Any, TypeVar

from datarepo.data.data_manager import DataManager, UnconstrainedDataManager
from datarepo.data.fetch_plan import INSTANCE_NAME
from datarepo.data.load_context import LoadContext
from datarepo.data.metadata import Id, Metadata
from datarepo.repositories.base import DataRepository, FetchPlanLike
from datarepo.repositories.domain import Page, Pageable, Sort
from datarepo.repositories.queries.loader_helper import (
    apply_pageable_for_condition_loader,
    to_loader_sort,
)
from datarepo.repositories.support.method_metadata import CrudMethodMetadataAccessor

T = TypeVar("T")
ID = TypeVar("ID")


class DataRepositoryImpl(DataRepository[T, ID]):
    """Base repository operations for one domain class."""

    def __init__(
        self,
        domain_class: type[T],
        data_manager: DataManager,
        metadata: Metadata,
        method_metadata_accessor: CrudMethodMetadataAccessor,
    ) -> None:
        """Initialize the repository.

        Args:
            domain_class: Entity class managed by the repository
            data_manager: Constrained data manager
            metadata: Entity metadata registry
            method_metadata_accessor: Source of the current CRUD method metadata
        """
        self._domain_class = domain_class
        self.data_manager = data_manager
        self.unconstrained_data_manager = data_manager.unconstrained()
        self.metadata = metadata
        self.method_metadata_accessor = method_metadata_accessor

    @property
    def domain_class(self) -> type[T]:
        return self._domain_class

    @domain_class.setter
    def domain_class(self, domain_class: type[T]) -> None:
        self._domain_class = domain_class

    def get_data_manager(self) -> UnconstrainedDataManager:
        if self.method_metadata_accessor.get_crud_method_metadata().apply_constraints:
            return self.data_manager
        return self.unconstrained_data_manager

    def new_one(self) -> T:
        return self.get_data_manager().create(self._domain_class)

    async def find_one(self, entity_id: ID, fetch_plan: FetchPlanLike = None) -> T | None:
        return await (
            self.get_data_manager().load(self._domain_class).id(entity_id).fetch_plan(fetch_plan).optional()
        )

    async def find_by_id(self, entity_id: ID) -> T:
        return await self.get_data_manager().load(self._domain_class).id(entity_id).one()

    async def exists_by_id(self, entity_id: ID) -> bool:
        entity = await self.get_data_manager().load(self._domain_class).id(entity_id).optional()
        return entity is not None

    async def find_all(self, sort: Sort | None = None, fetch_plan: FetchPlanLike = None) -> list[T]:
        loader = self.get_data_manager().load(self._domain_class).all().fetch_plan(fetch_plan)
        if sort is not None:
            loader.sort(to_loader_sort(sort))
        return await loader.list()

    async def find_all_by_id(self, ids: Iterable[ID], fetch_plan: FetchPlanLike = None) -> list[T]:
        collection = self.to_collection(ids)
        if not collection:
            return []

        return await (
            self.get_data_manager().load(self._domain_class).ids(collection).fetch_plan(fetch_plan).list()
        )

    async def find_page(self, pageable: Pageable, fetch_plan: FetchPlanLike = None) -> Page[T]:
        data_manager = self.get_data_manager()
        loader = data_manager.load(self._domain_class).all().fetch_plan(fetch_plan)

        apply_pageable_for_condition_loader(loader, pageable)
        loader.sort(to_loader_sort(pageable.sort))

        results = await loader.list()

        context = LoadContext(self.metadata.get_class(self._domain_class))
        total = await data_manager.get_count(context)
        return Page(results, pageable, total)

    async def count(self) -> int:
        return await self.get_data_manager().get_count(
            LoadContext(self.metadata.get_class(self._domain_class))
        )

    async def save(self, entity: T) -> T:
        return await self.get_data_manager().save(entity)

    async def save_all(self, entities: Iterable[T]) -> list[T]:
        # Direct calls keep the metadata bound by the caller.
        saved_entities = []
        for entity in entities:
            saved_entities.append(await DataRepositoryImpl.save(self, entity))
        return saved_entities

    async def delete_by_id(self, entity_id: ID) -> None:
        await self.get_data_manager().remove(Id.of(entity_id, self._domain_class))

    async def delete(self, entity: T) -> None:
        await self.get_data_manager().remove(entity)

    async def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        collection = self.to_collection(ids)
        if not collection:
            return

        data_manager = self.get_data_manager()
        for entity in await DataRepositoryImpl.find_all_by_id(self, collection):
            await data_manager.remove(entity)

    async def delete_all(self, entities: Iterable[T] | None = None) -> None:
        data_manager = self.get_data_manager()
        if entities is None:
            entities = await (
                data_manager.load(self._domain_class).all().fetch_plan(INSTANCE_NAME).list()
            )
        for entity in entities:
            await data_manager.remove(entity)

    @staticmethod
    def to_collection(ids: Iterable[Any]) -> Collection[Any]:
        if isinstance(ids, (list, tuple, set, frozenset)):
            return ids
        return list(ids)


__all__ = ["DataRepositoryImpl"]
