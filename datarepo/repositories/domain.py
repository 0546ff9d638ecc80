"""Paging and sorting types of the repository interface.

These are the types application code passes to repositories. The
repository adapter translates them into the data manager's own ``Sort``
and offset/limit settings.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from datarepo.exceptions import ValidationError

T = TypeVar("T")
R = TypeVar("R")


class Direction(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_string(cls, value: str) -> Direction:
        """Parse a direction case-insensitively.

        Raises:
            ValidationError: If the value is neither ``asc`` nor ``desc``
        """
        try:
            return cls(value.lower())
        except ValueError as e:
            raise ValidationError(
                f"Invalid sort direction '{value}'; expected 'asc' or 'desc'",
                field="direction",
            ) from e

    @property
    def is_ascending(self) -> bool:
        return self is Direction.ASC


@dataclass(frozen=True)
class Order:
    """Sort order of a single property."""

    property: str
    direction: Direction = Direction.ASC
    ignore_case: bool = False

    def __post_init__(self) -> None:
        if not self.property:
            raise ValidationError("Sort property must not be empty", field="sort")

    @classmethod
    def asc(cls, property_name: str) -> Order:
        return cls(property_name, Direction.ASC)

    @classmethod
    def desc(cls, property_name: str) -> Order:
        return cls(property_name, Direction.DESC)

    def with_direction(self, direction: Direction) -> Order:
        return Order(self.property, direction, self.ignore_case)

    def ignoring_case(self) -> Order:
        return Order(self.property, self.direction, True)


@dataclass(frozen=True)
class Sort:
    """Sort made of one or more orders."""

    orders: tuple[Order, ...] = ()

    @classmethod
    def by(cls, *orders: Order | str, direction: Direction = Direction.ASC) -> Sort:
        """Create a sort from orders or property names.

        Example:
            Sort.by("last_name", "first_name")
            Sort.by(Order.desc("created_at"), Order.asc("name"))
        """
        return cls(
            tuple(o if isinstance(o, Order) else Order(o, direction) for o in orders)
        )

    @classmethod
    def unsorted(cls) -> Sort:
        return cls()

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    @property
    def is_unsorted(self) -> bool:
        return not self.orders

    def and_(self, other: Sort) -> Sort:
        """Combine with another sort; this sort's orders come first."""
        return Sort(self.orders + other.orders)

    def ascending(self) -> Sort:
        return Sort(tuple(o.with_direction(Direction.ASC) for o in self.orders))

    def descending(self) -> Sort:
        return Sort(tuple(o.with_direction(Direction.DESC) for o in self.orders))

    def get_order_for(self, property_name: str) -> Order | None:
        for order in self.orders:
            if order.property == property_name:
                return order
        return None

    def __iter__(self) -> Iterator[Order]:
        return iter(self.orders)


class Pageable(ABC):
    """Paging request. Use ``PageRequest.of`` or ``Pageable.unpaged()``."""

    @staticmethod
    def unpaged(sort: Sort | None = None) -> Pageable:
        return Unpaged(sort or Sort.unsorted())

    @property
    @abstractmethod
    def is_paged(self) -> bool:
        """Whether the request limits the results to one page."""

    @property
    def is_unpaged(self) -> bool:
        return not self.is_paged

    @property
    @abstractmethod
    def page_number(self) -> int:
        """Zero-based page index."""

    @property
    @abstractmethod
    def page_size(self) -> int:
        """Number of items per page."""

    @property
    @abstractmethod
    def offset(self) -> int:
        """Index of the first item of the page."""

    @property
    @abstractmethod
    def sort(self) -> Sort:
        """Sort applied to the results."""


@dataclass(frozen=True)
class PageRequest(Pageable):
    """Request for one page of results.

    Attributes:
        number: Zero-based page index
        size: Number of items per page
        page_sort: Sort applied before paging
    """

    number: int
    size: int
    page_sort: Sort = field(default_factory=Sort.unsorted)

    def __post_init__(self) -> None:
        if self.number < 0:
            raise ValidationError("Page index must not be negative", field="page")
        if self.size < 1:
            raise ValidationError("Page size must be at least one", field="size")

    @classmethod
    def of(cls, page: int, size: int, sort: Sort | None = None) -> PageRequest:
        return cls(page, size, sort or Sort.unsorted())

    @classmethod
    def of_size(cls, size: int) -> PageRequest:
        return cls(0, size)

    @property
    def is_paged(self) -> bool:
        return True

    @property
    def page_number(self) -> int:
        return self.number

    @property
    def page_size(self) -> int:
        return self.size

    @property
    def offset(self) -> int:
        return self.number * self.size

    @property
    def sort(self) -> Sort:
        return self.page_sort

    @property
    def has_previous(self) -> bool:
        return self.number > 0

    def next(self) -> PageRequest:
        return PageRequest(self.number + 1, self.size, self.page_sort)

    def previous_or_first(self) -> PageRequest:
        if self.has_previous:
            return PageRequest(self.number - 1, self.size, self.page_sort)
        return self.first()

    def first(self) -> PageRequest:
        return PageRequest(0, self.size, self.page_sort)

    def with_sort(self, sort: Sort) -> PageRequest:
        return PageRequest(self.number, self.size, sort)


@dataclass(frozen=True)
class Unpaged(Pageable):
    """Request for all results, optionally sorted."""

    unpaged_sort: Sort = field(default_factory=Sort.unsorted)

    @property
    def is_paged(self) -> bool:
        return False

    @property
    def page_number(self) -> int:
        raise ValidationError("Unpaged request has no page number", field="page")

    @property
    def page_size(self) -> int:
        raise ValidationError("Unpaged request has no page size", field="size")

    @property
    def offset(self) -> int:
        raise ValidationError("Unpaged request has no offset", field="offset")

    @property
    def sort(self) -> Sort:
        return self.unpaged_sort


class Page(Generic[T]):
    """One page of results together with the total number of results."""

    def __init__(self, content: Sequence[T], pageable: Pageable, total: int) -> None:
        self.content: list[T] = list(content)
        self.pageable = pageable

        # The last page knows the exact total, even if the count query was stale.
        if self.content and pageable.is_paged and pageable.offset + pageable.page_size > total:
            total = pageable.offset + len(self.content)
        self.total_elements = total

    @property
    def number(self) -> int:
        return self.pageable.page_number if self.pageable.is_paged else 0

    @property
    def size(self) -> int:
        return self.pageable.page_size if self.pageable.is_paged else len(self.content)

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def total_pages(self) -> int:
        if self.size == 0:
            return 1
        return math.ceil(self.total_elements / self.size)

    @property
    def sort(self) -> Sort:
        return self.pageable.sort

    @property
    def has_content(self) -> bool:
        return bool(self.content)

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.number > 0

    @property
    def is_first(self) -> bool:
        return not self.has_previous

    @property
    def is_last(self) -> bool:
        return not self.has_next

    def map(self, converter: Callable[[T], R]) -> Page[R]:
        """Convert the content, keeping paging information."""
        return Page([converter(item) for item in self.content], self.pageable, self.total_elements)

    def __iter__(self) -> Iterator[T]:
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)

    def __repr__(self) -> str:
        return f"Page {self.number + 1} of {self.total_pages} containing {len(self.content)} instances"

    def to_dict(self) -> dict[str, Any]:
        """Paging summary without the content."""
        return {
            "number": self.number,
            "size": self.size,
            "number_of_elements": self.number_of_elements,
            "total_elements": self.total_elements,
            "total_pages": self.total_pages,
        }


__all__ = [
    "Direction",
    "Order",
    "Page",
    "PageRequest",
    "Pageable",
    "Sort",
    "Unpaged",
]
