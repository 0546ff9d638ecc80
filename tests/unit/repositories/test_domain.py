"""Unit tests for repository paging and sorting types."""

import pytest

from datarepo.exceptions import ValidationError
from datarepo.repositories.domain import (
    Direction,
    Order,
    Page,
    Pageable,
    PageRequest,
    Sort,
)


class TestDirection:
    def test_from_string_is_case_insensitive(self):
        assert Direction.from_string("DESC") is Direction.DESC
        assert Direction.from_string("asc") is Direction.ASC

    def test_from_string_rejects_unknown(self):
        with pytest.raises(ValidationError) as exc_info:
            Direction.from_string("sideways")
        assert exc_info.value.field == "direction"


class TestSort:
    def test_by_property_names(self):
        sort = Sort.by("last_name", "first_name")

        assert [o.property for o in sort] == ["last_name", "first_name"]
        assert all(o.direction is Direction.ASC for o in sort)

    def test_by_with_direction(self):
        sort = Sort.by("created_at", direction=Direction.DESC)
        assert sort.orders == (Order("created_at", Direction.DESC),)

    def test_by_mixed_orders(self):
        sort = Sort.by(Order.desc("created_at"), "name")
        assert sort.orders == (Order.desc("created_at"), Order.asc("name"))

    def test_unsorted(self):
        sort = Sort.unsorted()
        assert sort.is_unsorted
        assert not sort.is_sorted

    def test_and_keeps_order(self):
        combined = Sort.by("a").and_(Sort.by(Order.desc("b")))
        assert [o.property for o in combined] == ["a", "b"]
        assert combined.get_order_for("b").direction is Direction.DESC

    def test_descending_flips_all_orders(self):
        sort = Sort.by("a", "b").descending()
        assert all(o.direction is Direction.DESC for o in sort)

    def test_get_order_for_missing(self):
        assert Sort.by("a").get_order_for("z") is None

    def test_empty_property_rejected(self):
        with pytest.raises(ValidationError):
            Order("")


class TestPageRequest:
    def test_offset(self):
        assert PageRequest.of(3, 20).offset == 60

    def test_defaults_to_unsorted(self):
        assert PageRequest.of(0, 10).sort.is_unsorted

    def test_negative_page_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            PageRequest.of(-1, 10)
        assert exc_info.value.field == "page"

    def test_zero_size_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            PageRequest.of(0, 0)
        assert exc_info.value.field == "size"

    def test_navigation(self):
        request = PageRequest.of(1, 5, Sort.by("name"))

        assert request.next().page_number == 2
        assert request.previous_or_first().page_number == 0
        assert request.first().previous_or_first().page_number == 0
        assert request.next().sort == Sort.by("name")

    def test_is_paged(self):
        assert PageRequest.of(0, 1).is_paged


class TestPageable:
    def test_is_abstract(self):
        with pytest.raises(TypeError):
            Pageable()

    def test_implementations(self):
        assert isinstance(PageRequest.of(0, 1), Pageable)
        assert isinstance(Pageable.unpaged(), Pageable)


class TestUnpaged:
    def test_is_not_paged(self):
        pageable = Pageable.unpaged()
        assert pageable.is_unpaged
        assert pageable.sort.is_unsorted

    def test_keeps_sort(self):
        assert Pageable.unpaged(Sort.by("name")).sort == Sort.by("name")

    def test_has_no_offset(self):
        with pytest.raises(ValidationError):
            _ = Pageable.unpaged().offset


class TestPage:
    def test_totals(self):
        page = Page(["a", "b"], PageRequest.of(0, 2), 5)

        assert page.total_elements == 5
        assert page.total_pages == 3
        assert page.has_next
        assert page.is_first
        assert not page.is_last

    def test_last_page_corrects_total(self):
        # stale count of 5, but the third page of 10 has 3 items
        page = Page(["a", "b", "c"], PageRequest.of(2, 10), 5)

        assert page.total_elements == 23
        assert page.is_last

    def test_empty_page(self):
        page = Page([], PageRequest.of(0, 10), 0)

        assert not page.has_content
        assert page.total_pages == 0
        assert page.is_last

    def test_unpaged_page(self):
        page = Page(["a", "b"], Pageable.unpaged(), 2)

        assert page.number == 0
        assert page.size == 2
        assert page.total_pages == 1

    def test_map_keeps_paging(self):
        page = Page([1, 2], PageRequest.of(1, 2), 6).map(lambda x: x * 10)

        assert page.content == [10, 20]
        assert page.number == 1
        assert page.total_elements == 6

    def test_iteration_and_len(self):
        page = Page(["x", "y"], PageRequest.of(0, 5), 2)
        assert list(page) == ["x", "y"]
        assert len(page) == 2

    def test_to_dict(self):
        page = Page(["x"], PageRequest.of(0, 5), 1)
        assert page.to_dict() == {
            "number": 0,
            "size": 5,
            "number_of_elements": 1,
            "total_elements": 1,
            "total_pages": 1,
        }
