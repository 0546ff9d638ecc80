"""Base repository interface.

Application repositories are declared as subclasses of ``DataRepository``
parameterized with the entity class and its identifier type:

    @apply_constraints(False)
    class CustomerRepository(DataRepository[Customer, int]):

        @query("status = :status")
        async def find_by_status(self, status: str, sort: Sort) -> list[Customer]:
            ...

``DataRepositoryFactory.get_repository`` turns such a declaration into a
working repository.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from datarepo.data.fetch_plan import FetchPlan
from datarepo.repositories.domain import Page, Pageable, Sort

T = TypeVar("T")
ID = TypeVar("ID")

FetchPlanLike = FetchPlan | str | None


class DataRepository(ABC, Generic[T, ID]):
    """Generic CRUD, sorting and paging operations for one entity class.

    Type Parameters:
        T: The entity type this repository manages
        ID: The type of the entity identifier
    """

    @abstractmethod
    def new_one(self) -> T:
        """Create a new, unsaved instance."""

    @abstractmethod
    async def find_one(self, entity_id: ID, fetch_plan: FetchPlanLike = None) -> T | None:
        """Find an instance by id with a fetch plan, ``None`` if absent."""

    @abstractmethod
    async def find_by_id(self, entity_id: ID) -> T:
        """Find an instance by id.

        Raises:
            EntityNotFoundError: If no instance has that id
        """

    @abstractmethod
    async def exists_by_id(self, entity_id: ID) -> bool:
        """Check whether an instance with that id exists."""

    @abstractmethod
    async def find_all(self, sort: Sort | None = None, fetch_plan: FetchPlanLike = None) -> list[T]:
        """Find all instances, optionally sorted."""

    @abstractmethod
    async def find_all_by_id(self, ids: Iterable[ID], fetch_plan: FetchPlanLike = None) -> list[T]:
        """Find the instances with the given ids."""

    @abstractmethod
    async def find_page(self, pageable: Pageable, fetch_plan: FetchPlanLike = None) -> Page[T]:
        """Find one page of instances."""

    @abstractmethod
    async def count(self) -> int:
        """Count all instances."""

    @abstractmethod
    async def save(self, entity: T) -> T:
        """Save an instance and return the saved copy."""

    @abstractmethod
    async def save_all(self, entities: Iterable[T]) -> list[T]:
        """Save instances one by one and return the saved copies."""

    @abstractmethod
    async def delete_by_id(self, entity_id: ID) -> None:
        """Delete the instance with the given id."""

    @abstractmethod
    async def delete(self, entity: T) -> None:
        """Delete an instance."""

    @abstractmethod
    async def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        """Delete the instances with the given ids."""

    @abstractmethod
    async def delete_all(self, entities: Iterable[T] | None = None) -> None:
        """Delete the given instances, or every instance when none are given."""


# Operations implemented by the repository adapter for every repository
CRUD_METHOD_NAMES: tuple[str, ...] = tuple(
    sorted(
        name
        for name, member in vars(DataRepository).items()
        if getattr(member, "__isabstractmethod__", False)
    )
)


def is_crud_method(name: str) -> bool:
    return name in CRUD_METHOD_NAMES


__all__ = [
    "CRUD_METHOD_NAMES",
    "DataRepository",
    "FetchPlanLike",
    "ID",
    "T",
    "is_crud_method",
]
