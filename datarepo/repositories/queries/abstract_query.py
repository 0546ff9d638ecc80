"""Base class for repository query methods.

A query object is created once per query method when the repository is
built. It captures everything needed to run the method later: the data
manager matching the method's access constraints, the fetch plan, the
positions of the special ``Sort`` and ``Pageable`` parameters and the
bindings of named query parameters.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from types import UnionType
from typing import Any, Union, get_args, get_origin, get_type_hints

from datarepo.config import get_settings
from datarepo.data.data_manager import DataManager, UnconstrainedDataManager
from datarepo.data.metadata import Metadata
from datarepo.exceptions import QueryCreationError
from datarepo.repositories.annotations import FETCH_PLAN_ATTR
from datarepo.repositories.domain import Page, Pageable, Sort
from datarepo.repositories.support.method_metadata import determine_apply_constraints
from datarepo.repositories.support.repository_metadata import RepositoryMetadata


class ReturnKind(str, Enum):
    """Shape of a query method result."""

    LIST = "list"
    PAGE = "page"
    COUNT = "count"
    EXISTS = "exists"
    ONE = "one"


class Parameters:
    """Parameters of a query method, without ``self``."""

    def __init__(self, method: Callable[..., Any]) -> None:
        signature = inspect.signature(method)
        hints = _type_hints(method)

        self.names: list[str] = []
        self.pageable_index = -1
        self.sort_index = -1

        parameters = list(signature.parameters.values())[1:]
        for index, parameter in enumerate(parameters):
            if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
                raise QueryCreationError(
                    "Query methods cannot take *args or **kwargs",
                    method=method.__qualname__,
                )
            self.names.append(parameter.name)

            annotation = _unwrap_optional(hints.get(parameter.name))
            if _is_subclass(annotation, Pageable):
                self.pageable_index = index
            elif _is_subclass(annotation, Sort):
                self.sort_index = index

        self._signature = signature

    @property
    def has_pageable(self) -> bool:
        return self.pageable_index >= 0

    @property
    def has_sort(self) -> bool:
        return self.sort_index >= 0

    def bindable_names(self) -> list[str]:
        """Names of parameters that may be bound to query placeholders."""
        special = {self.pageable_index, self.sort_index}
        return [name for index, name in enumerate(self.names) if index not in special]

    def values(self, args: Sequence[Any], kwargs: dict[str, Any]) -> list[Any]:
        """Values of a call in parameter order, defaults applied.

        Keyword-only parameters are included, so indexes line up with ``names``.
        """
        bound = self._signature.bind(None, *args, **kwargs)
        bound.apply_defaults()
        return [bound.arguments[name] for name in self.names]

    def __len__(self) -> int:
        return len(self.names)


class QueryMethod:
    """Descriptor of a repository query method."""

    def __init__(self, method: Callable[..., Any], metadata: RepositoryMetadata) -> None:
        self.method = method
        self.metadata = metadata
        self.name = method.__name__
        self.parameters = Parameters(method)
        self.return_kind = _return_kind(method)

    @property
    def domain_class(self) -> type:
        return self.metadata.domain_class

    @property
    def is_page_query(self) -> bool:
        return self.return_kind is ReturnKind.PAGE

    def __repr__(self) -> str:
        return f"QueryMethod({self.metadata.repository_interface.__name__}.{self.name})"


class AbstractQuery(ABC):
    """Base query implementation.

    Subclasses implement ``execute`` for a particular way of declaring
    queries; ``DeclaredQuery`` handles methods decorated with ``@query``.
    """

    def __init__(
        self,
        data_manager: DataManager,
        metadata: Metadata,
        method: Callable[..., Any],
        repository_metadata: RepositoryMetadata,
    ) -> None:
        self.method = method
        self.repository_metadata = repository_metadata
        self.query_method = QueryMethod(method, repository_metadata)
        self.metadata = metadata

        # DataManager or its unconstrained counterpart, depending on @apply_constraints
        apply_constraints = determine_apply_constraints(
            method, repository_metadata.repository_interface
        )
        self.data_manager: UnconstrainedDataManager = (
            data_manager if apply_constraints else data_manager.unconstrained()
        )

        self.named_parameters_bindings: dict[str, int] = {}
        self.sort_index = -1
        self.pageable_index = -1
        self.fetch_plan: str = get_settings().default_fetch_plan

        self._set_fetch_plan(method)
        self.process_special_parameters()

    def get_query_method(self) -> QueryMethod:
        return self.query_method

    def get_data_manager(self) -> UnconstrainedDataManager:
        return self.data_manager

    def _set_fetch_plan(self, method: Callable[..., Any]) -> None:
        fetch_plan_name = getattr(method, FETCH_PLAN_ATTR, None)
        if fetch_plan_name is not None:
            self.fetch_plan = fetch_plan_name

    def build_named_parameters_map(self, values: Sequence[Any]) -> dict[str, Any]:
        """Map bound query parameter names to the call's positional values."""
        return {name: values[index] for name, index in self.named_parameters_bindings.items()}

    def process_special_parameters(self) -> None:
        parameters = self.query_method.parameters

        self.pageable_index = parameters.pageable_index
        self.sort_index = parameters.sort_index

    def bind_parameters(self, names: Iterable[str]) -> None:
        """Bind query parameter ``names`` to method parameters of the same name.

        Raises:
            QueryCreationError: If a name has no matching method parameter
        """
        parameters = self.query_method.parameters
        bindable = parameters.bindable_names()
        for name in names:
            if name not in bindable:
                raise QueryCreationError(
                    f"Query parameter ':{name}' has no matching method parameter",
                    method=self.format_method(self.method),
                )
            self.named_parameters_bindings[name] = parameters.names.index(name)

    @abstractmethod
    async def execute(self, values: Sequence[Any]) -> Any:
        """Run the query with the positional values of a method call."""

    @staticmethod
    def format_method(method: Callable[..., Any]) -> str:
        qualname = method.__qualname__
        owner, _, name = qualname.rpartition(".")
        return f"{method.__module__}.{owner}#{name}" if owner else f"{method.__module__}#{name}"

    def __str__(self) -> str:
        return f"{type(self).__name__}:{{{self.get_query_description()}}}"

    def get_query_description(self) -> str:
        return (
            f"fetchPlan:'{self.fetch_plan}'; "
            f"sortIndex:'{self.sort_index}'; "
            f"pageableIndex:'{self.pageable_index}'"
        )


def _type_hints(method: Callable[..., Any]) -> dict[str, Any]:
    try:
        return get_type_hints(method)
    except (NameError, TypeError) as e:
        raise QueryCreationError(
            f"Cannot resolve type annotations: {e}",
            method=method.__qualname__,
        ) from e


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _is_subclass(annotation: Any, cls: type) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, cls)


def _return_kind(method: Callable[..., Any]) -> ReturnKind:
    annotation = _type_hints(method).get("return")
    origin = get_origin(annotation) or annotation

    if _is_subclass(origin, Page):
        return ReturnKind.PAGE
    if origin in (list, tuple, Sequence, Iterable) or _is_subclass(origin, list):
        return ReturnKind.LIST
    if annotation is bool:
        return ReturnKind.EXISTS
    if annotation is int:
        return ReturnKind.COUNT
    return ReturnKind.ONE


__all__ = [
    "AbstractQuery",
    "Parameters",
    "QueryMethod",
    "ReturnKind",
]
