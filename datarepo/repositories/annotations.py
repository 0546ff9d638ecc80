"""Decorators for repository interfaces and their methods."""

from collections.abc import Callable
from typing import TypeVar

F = TypeVar("F", bound=Callable)

APPLY_CONSTRAINTS_ATTR = "__apply_constraints__"
FETCH_PLAN_ATTR = "__fetch_plan__"
QUERY_ATTR = "__query__"


def apply_constraints(value: bool = True) -> Callable[[F], F]:
    """Choose whether access constraints apply.

    Works on a repository interface (all its methods) and on a single
    method, which takes precedence over the interface.

    Example:
        @apply_constraints(False)
        class AuditRepository(DataRepository[AuditRecord, int]):
            ...
    """

    def decorator(target: F) -> F:
        setattr(target, APPLY_CONSTRAINTS_ATTR, value)
        return target

    return decorator


def fetch_plan(name: str) -> Callable[[F], F]:
    """Set the fetch plan used by a query method."""

    def decorator(method: F) -> F:
        setattr(method, FETCH_PLAN_ATTR, name)
        return method

    return decorator


def query(condition: str) -> Callable[[F], F]:
    """Declare a query method.

    ``condition`` is a SQL ``WHERE`` fragment whose ``:name`` placeholders
    are bound to the method parameters of the same name.

    Example:
        @query("status = :status and total > :minimum")
        async def find_large(self, status: str, minimum: int) -> list[Order]:
            ...
    """

    def decorator(method: F) -> F:
        setattr(method, QUERY_ATTR, condition)
        return method

    return decorator


__all__ = [
    "APPLY_CONSTRAINTS_ATTR",
    "FETCH_PLAN_ATTR",
    "QUERY_ATTR",
    "apply_constraints",
    "fetch_plan",
    "query",
]
