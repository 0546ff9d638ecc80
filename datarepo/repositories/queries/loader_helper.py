"""Translation of repository paging and sorting into data manager terms."""

from datarepo.data import sort as loader_sort
from datarepo.data.fluent_loader import ByCondition
from datarepo.data.load_context import LoadContext
from datarepo.repositories.domain import Pageable, Sort


def to_loader_sort(sort: Sort | None) -> loader_sort.Sort:
    """Convert a repository ``Sort`` into the data manager's ``Sort``."""
    if sort is None or sort.is_unsorted:
        return loader_sort.UNSORTED

    return loader_sort.Sort(
        tuple(
            loader_sort.Order(
                order.property,
                loader_sort.Direction.ASC if order.direction.is_ascending else loader_sort.Direction.DESC,
                order.ignore_case,
            )
            for order in sort
        )
    )


def apply_pageable_for_condition_loader(loader: ByCondition, pageable: Pageable) -> None:
    """Limit a condition loader to the requested page."""
    if pageable.is_paged:
        loader.first_result(pageable.offset).max_results(pageable.page_size)


def apply_pageable_for_load_context(context: LoadContext, pageable: Pageable) -> None:
    """Limit a load context to the requested page and apply its sort."""
    query = context.get_or_create_query()
    if pageable.is_paged:
        query.set_first_result(pageable.offset).set_max_results(pageable.page_size)
    query.set_sort(to_loader_sort(pageable.sort))


__all__ = [
    "apply_pageable_for_condition_loader",
    "apply_pageable_for_load_context",
    "to_loader_sort",
]
