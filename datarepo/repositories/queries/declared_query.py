"""Queries declared with the ``@query`` decorator."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any

from datarepo.data.data_manager import DataManager
from datarepo.data.load_context import Query
from datarepo.data.metadata import Metadata
from datarepo.exceptions import QueryCreationError
from datarepo.repositories.annotations import QUERY_ATTR
from datarepo.repositories.domain import Page, Pageable
from datarepo.repositories.queries.abstract_query import AbstractQuery, ReturnKind
from datarepo.repositories.queries.loader_helper import (
    apply_pageable_for_load_context,
    to_loader_sort,
)
from datarepo.repositories.support.repository_metadata import RepositoryMetadata

# ":name" but not the "::type" cast syntax
PLACEHOLDER_PATTERN = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")


def query_parameter_names(query_string: str) -> list[str]:
    """Distinct placeholder names in order of first appearance."""
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(query_string)))


class DeclaredQuery(AbstractQuery):
    """Runs the condition given in ``@query`` against the domain class."""

    def __init__(
        self,
        data_manager: DataManager,
        metadata: Metadata,
        method: Callable[..., Any],
        repository_metadata: RepositoryMetadata,
    ) -> None:
        super().__init__(data_manager, metadata, method, repository_metadata)

        query_string = getattr(method, QUERY_ATTR, None)
        if not query_string or not query_string.strip():
            raise QueryCreationError("Query condition must not be empty", method=self.format_method(method))
        self.query_string: str = query_string.strip()

        self.bind_parameters(query_parameter_names(self.query_string))

        if self.query_method.is_page_query and self.pageable_index < 0:
            raise QueryCreationError(
                "Query methods returning a Page need a Pageable parameter",
                method=self.format_method(method),
            )

    async def execute(self, values: Sequence[Any]) -> Any:
        domain_class = self.query_method.domain_class
        parameters = self.build_named_parameters_map(values)

        loader = (
            self.data_manager.load(domain_class)
            .query(self.query_string)
            .parameters(parameters)
            .fetch_plan(self.fetch_plan)
        )
        if self.sort_index >= 0 and values[self.sort_index] is not None:
            loader.sort(to_loader_sort(values[self.sort_index]))

        context = loader.load_context()
        pageable: Pageable | None = values[self.pageable_index] if self.pageable_index >= 0 else None
        if pageable is not None:
            apply_pageable_for_load_context(context, pageable)
            if self.sort_index >= 0 and values[self.sort_index] is not None and pageable.sort.is_unsorted:
                # an explicit Sort argument wins over an unsorted Pageable
                context.query.set_sort(to_loader_sort(values[self.sort_index]))

        return_kind = self.query_method.return_kind
        if return_kind is ReturnKind.COUNT:
            return await self.data_manager.get_count(context)
        if return_kind is ReturnKind.EXISTS:
            context.query.set_max_results(1)
            return await self.data_manager.load_one(context) is not None
        if return_kind is ReturnKind.ONE:
            return await self.data_manager.load_one(context)

        results = await self.data_manager.load_list(context)
        if return_kind is ReturnKind.PAGE:
            count_context = loader.load_context().set_query(
                Query(query_string=self.query_string, parameters=dict(parameters))
            )
            total = await self.data_manager.get_count(count_context)
            return Page(results, pageable or Pageable.unpaged(), total)
        return results

    def get_query_description(self) -> str:
        return f"query:'{self.query_string}'; {super().get_query_description()}"


__all__ = ["DeclaredQuery", "PLACEHOLDER_PATTERN", "query_parameter_names"]
