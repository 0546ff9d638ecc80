"""Factory turning repository interfaces into working repositories."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from datarepo.data.data_manager import DataManager
from datarepo.data.metadata import Metadata
from datarepo.exceptions import QueryCreationError
from datarepo.repositories.base import CRUD_METHOD_NAMES
from datarepo.repositories.queries.abstract_query import AbstractQuery
from datarepo.repositories.queries.declared_query import DeclaredQuery
from datarepo.repositories.support.method_metadata import (
    CrudMethodMetadata,
    CrudMethodMetadataAccessor,
    crud_method_metadata_for,
)
from datarepo.repositories.support.repository_impl import DataRepositoryImpl
from datarepo.repositories.support.repository_metadata import RepositoryMetadata
from datarepo.shared.utils.logging import get_logger

logger = get_logger(__name__)

R = TypeVar("R")


class DataRepositoryFactory:
    """Builds repository instances for ``DataRepository`` interfaces.

    Usage:
        factory = DataRepositoryFactory(data_manager)
        customers = factory.get_repository(CustomerRepository)
        page = await customers.find_page(PageRequest.of(0, 20))
    """

    def __init__(
        self,
        data_manager: DataManager,
        metadata: Metadata | None = None,
        method_metadata_accessor: CrudMethodMetadataAccessor | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            data_manager: Constrained data manager shared by all repositories
            metadata: Entity metadata (the data manager's by default)
            method_metadata_accessor: Accessor shared by all repositories
        """
        self.data_manager = data_manager
        self.metadata = metadata or data_manager.metadata
        self.method_metadata_accessor = method_metadata_accessor or CrudMethodMetadataAccessor()
        self._repositories: dict[type, Any] = {}

    def get_repository(self, repository_interface: type[R]) -> R:
        """Get the repository for an interface, building it on first use.

        Raises:
            QueryCreationError: If the interface declares methods that
                cannot be implemented
        """
        repository = self._repositories.get(repository_interface)
        if repository is None:
            repository = self._create_repository(repository_interface)
            self._repositories[repository_interface] = repository
        return repository

    def _create_repository(self, repository_interface: type[R]) -> R:
        repository_metadata = RepositoryMetadata(repository_interface)
        namespace: dict[str, Any] = {"__module__": repository_interface.__module__}

        for name in CRUD_METHOD_NAMES:
            metadata = crud_method_metadata_for(
                repository_metadata.get_method(name), repository_interface
            )
            namespace[name] = self._crud_method(name, metadata)

        queries: dict[str, AbstractQuery] = {}
        for name, method in repository_metadata.get_query_methods().items():
            query = DeclaredQuery(self.data_manager, self.metadata, method, repository_metadata)
            queries[name] = query
            namespace[name] = _query_method(method, query)
            logger.debug("query_created", method=query.format_method(method), query=str(query))
        namespace["_queries"] = queries

        repository_class = type(
            f"{repository_interface.__name__}Impl",
            (DataRepositoryImpl, repository_interface),
            namespace,
        )

        unimplemented = sorted(getattr(repository_class, "__abstractmethods__", ()))
        if unimplemented:
            raise QueryCreationError(
                f"{repository_interface.__name__} declares methods without a query: "
                f"{', '.join(unimplemented)}",
                method=unimplemented[0],
            )

        repository = repository_class(
            repository_metadata.domain_class,
            self.data_manager,
            self.metadata,
            self.method_metadata_accessor,
        )
        logger.info(
            "repository_created",
            repository=repository_metadata.name,
            entity=repository_metadata.domain_class.__name__,
            queries=len(queries),
        )
        return repository

    @staticmethod
    def _crud_method(name: str, metadata: CrudMethodMetadata) -> Callable[..., Any]:
        target = getattr(DataRepositoryImpl, name)

        if inspect.iscoroutinefunction(target):

            @functools.wraps(target)
            async def crud_method(self: DataRepositoryImpl, *args: Any, **kwargs: Any) -> Any:
                with self.method_metadata_accessor.bind(metadata):
                    return await target(self, *args, **kwargs)

        else:

            @functools.wraps(target)
            def crud_method(self: DataRepositoryImpl, *args: Any, **kwargs: Any) -> Any:
                with self.method_metadata_accessor.bind(metadata):
                    return target(self, *args, **kwargs)

        return crud_method


def _query_method(method: Callable[..., Any], query: AbstractQuery) -> Callable[..., Any]:
    parameters = query.get_query_method().parameters

    @functools.wraps(method)
    async def query_method(self: Any, *args: Any, **kwargs: Any) -> Any:
        return await query.execute(parameters.values(args, kwargs))

    query_method.__isabstractmethod__ = False
    return query_method


__all__ = ["DataRepositoryFactory"]
