"""Metadata of a repository interface."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, get_args, get_origin

from datarepo.exceptions import QueryCreationError
from datarepo.repositories.annotations import QUERY_ATTR
from datarepo.repositories.base import DataRepository, is_crud_method


class RepositoryMetadata:
    """Domain class, id type and methods of a repository interface."""

    def __init__(self, repository_interface: type) -> None:
        if not (isinstance(repository_interface, type) and issubclass(repository_interface, DataRepository)):
            raise QueryCreationError(
                f"{repository_interface!r} is not a DataRepository interface"
            )
        self.repository_interface = repository_interface
        self.domain_class, self.id_type = self._resolve_type_arguments(repository_interface)

    @property
    def name(self) -> str:
        return f"{self.repository_interface.__module__}.{self.repository_interface.__qualname__}"

    def get_query_methods(self) -> dict[str, Callable[..., Any]]:
        """Methods declared with ``@query``, by name."""
        methods = {}
        for name, member in inspect.getmembers(self.repository_interface, inspect.isfunction):
            if hasattr(member, QUERY_ATTR):
                if is_crud_method(name):
                    raise QueryCreationError(
                        f"Base repository method '{name}' cannot be redeclared as a query",
                        method=name,
                    )
                methods[name] = member
        return methods

    def get_method(self, name: str) -> Callable[..., Any]:
        return getattr(self.repository_interface, name)

    @staticmethod
    def _resolve_type_arguments(repository_interface: type) -> tuple[type, Any]:
        for cls in repository_interface.__mro__:
            for base in getattr(cls, "__orig_bases__", ()):
                origin = get_origin(base)
                if isinstance(origin, type) and issubclass(origin, DataRepository):
                    args = get_args(base)
                    if len(args) == 2 and isinstance(args[0], type):
                        return args[0], args[1]
        raise QueryCreationError(
            f"Cannot resolve the domain class of {repository_interface.__name__}; "
            "declare it as DataRepository[Entity, IdType]"
        )


__all__ = ["RepositoryMetadata"]
