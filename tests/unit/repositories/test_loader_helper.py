"""Unit tests for paging/sorting translation into data manager terms."""

from unittest.mock import MagicMock

from datarepo.data import sort as loader_sort
from datarepo.data.load_context import LoadContext
from datarepo.data.metadata import Metadata
from datarepo.repositories.domain import Order, Pageable, PageRequest, Sort
from datarepo.repositories.queries.loader_helper import (
    apply_pageable_for_condition_loader,
    apply_pageable_for_load_context,
    to_loader_sort,
)
from tests.factories.entities import Customer


class TestToLoaderSort:
    def test_translates_orders(self):
        sort = Sort.by(Order.desc("created_at"), Order.asc("name").ignoring_case())

        result = to_loader_sort(sort)

        assert result.orders == (
            loader_sort.Order("created_at", loader_sort.Direction.DESC),
            loader_sort.Order("name", loader_sort.Direction.ASC, ignore_case=True),
        )

    def test_unsorted_maps_to_unsorted(self):
        assert to_loader_sort(Sort.unsorted()) is loader_sort.UNSORTED

    def test_none_maps_to_unsorted(self):
        assert to_loader_sort(None) is loader_sort.UNSORTED


class TestApplyPageableForConditionLoader:
    def test_paged_sets_first_and_max_results(self):
        loader = MagicMock()
        loader.first_result.return_value = loader

        apply_pageable_for_condition_loader(loader, PageRequest.of(2, 25))

        loader.first_result.assert_called_once_with(50)
        loader.max_results.assert_called_once_with(25)

    def test_unpaged_leaves_loader_alone(self):
        loader = MagicMock()

        apply_pageable_for_condition_loader(loader, Pageable.unpaged())

        loader.first_result.assert_not_called()
        loader.max_results.assert_not_called()


class TestApplyPageableForLoadContext:
    def test_sets_paging_and_sort(self):
        context = LoadContext(Metadata().get_class(Customer))

        apply_pageable_for_load_context(context, PageRequest.of(1, 10, Sort.by("name")))

        assert context.query.first_result == 10
        assert context.query.max_results == 10
        assert context.query.sort == loader_sort.Sort.by("name")

    def test_unpaged_only_sorts(self):
        context = LoadContext(Metadata().get_class(Customer))

        apply_pageable_for_load_context(context, Pageable.unpaged(Sort.by("email")))

        assert context.query.first_result == 0
        assert context.query.max_results == 0
        assert context.query.sort.is_sorted
