"""Access constraints applied by the constrained data manager.

The registry only stores constraints supplied by the application. Deciding
who may do what is the application's job; the data manager consults the
registry before every operation it performs with constraints enabled.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy.sql.elements import ColumnElement

from datarepo.data.metadata import MetaClass
from datarepo.exceptions import AccessDeniedError
from datarepo.shared.utils.logging import get_logger

logger = get_logger(__name__)


class EntityOperation(str, Enum):
    """Operations that can be constrained per entity."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


OperationPredicate = Callable[[MetaClass, EntityOperation], bool]
RowCondition = Callable[[], ColumnElement[bool]]


@dataclass(frozen=True)
class RowLevelConstraint:
    """Condition every loaded row of ``entity_class`` must satisfy.

    The condition is built lazily so it can read request-scoped state
    (current user, tenant) at query time.
    """

    entity_class: type
    condition: RowCondition


class AccessConstraintsRegistry:
    """Holds operation predicates and row-level conditions."""

    def __init__(self) -> None:
        self._operation_predicates: list[OperationPredicate] = []
        self._row_constraints: list[RowLevelConstraint] = []

    def add_operation_constraint(self, predicate: OperationPredicate) -> None:
        """Add a predicate deciding whether an entity operation is permitted."""
        self._operation_predicates.append(predicate)

    def add_row_constraint(self, entity_class: type, condition: RowCondition) -> None:
        """Add a row-level condition applied to every access of ``entity_class``."""
        self._row_constraints.append(RowLevelConstraint(entity_class, condition))

    def is_permitted(self, meta_class: MetaClass, operation: EntityOperation) -> bool:
        return all(predicate(meta_class, operation) for predicate in self._operation_predicates)

    def check_permitted(self, meta_class: MetaClass, operation: EntityOperation) -> None:
        """Raise if ``operation`` is not permitted for the entity.

        Raises:
            AccessDeniedError: If any predicate rejects the operation
        """
        if not self.is_permitted(meta_class, operation):
            logger.warning(
                "access_denied",
                entity=meta_class.name,
                operation=operation.value,
            )
            raise AccessDeniedError(meta_class.name, operation.value)

    def row_conditions(self, entity_class: type) -> list[ColumnElement[Any]]:
        """Build the row-level conditions registered for ``entity_class``."""
        return [
            constraint.condition()
            for constraint in self._row_constraints
            if issubclass(entity_class, constraint.entity_class)
        ]


__all__ = [
    "AccessConstraintsRegistry",
    "EntityOperation",
    "RowLevelConstraint",
]
