"""Sort definitions understood by the data manager."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from sqlalchemy import func
from sqlalchemy.orm import QueryableAttribute
from sqlalchemy.sql.elements import ColumnElement

from datarepo.exceptions import ValidationError


class Direction(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Order:
    """Sort order for a single entity property."""

    property: str
    direction: Direction = Direction.ASC
    ignore_case: bool = False

    @classmethod
    def asc(cls, property_name: str) -> Order:
        return cls(property_name, Direction.ASC)

    @classmethod
    def desc(cls, property_name: str) -> Order:
        return cls(property_name, Direction.DESC)

    def to_clause(self, entity_class: type) -> ColumnElement:
        """Build an ``ORDER BY`` clause against ``entity_class``."""
        column = getattr(entity_class, self.property, None)
        if not isinstance(column, QueryableAttribute):
            raise ValidationError(
                f"Cannot sort {entity_class.__name__} by unknown property '{self.property}'",
                field="sort",
            )
        if self.ignore_case:
            column = func.lower(column)
        return column.desc() if self.direction == Direction.DESC else column.asc()


@dataclass(frozen=True)
class Sort:
    """Ordered collection of sort orders."""

    orders: tuple[Order, ...] = ()

    @classmethod
    def by(cls, *orders: Order | str, direction: Direction = Direction.ASC) -> Sort:
        """Create a sort from orders or property names."""
        return cls(
            tuple(o if isinstance(o, Order) else Order(o, direction) for o in orders)
        )

    @classmethod
    def unsorted(cls) -> Sort:
        return UNSORTED

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def to_clauses(self, entity_class: type) -> list[ColumnElement]:
        return [order.to_clause(entity_class) for order in self.orders]

    def __iter__(self) -> Iterator[Order]:
        return iter(self.orders)


UNSORTED = Sort()


__all__ = ["Direction", "Order", "Sort", "UNSORTED"]
