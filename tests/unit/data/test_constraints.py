"""Unit tests for the access constraints registry."""

import pytest

from datarepo.data.constraints import AccessConstraintsRegistry, EntityOperation
from datarepo.data.metadata import Metadata
from datarepo.exceptions import AccessDeniedError
from tests.factories import Country, Customer


@pytest.fixture
def customer_meta():
    return Metadata().get_class(Customer)


class TestOperationConstraints:
    def test_everything_permitted_without_constraints(self, customer_meta):
        registry = AccessConstraintsRegistry()

        for operation in EntityOperation:
            assert registry.is_permitted(customer_meta, operation)

    def test_predicate_rejects(self, customer_meta):
        registry = AccessConstraintsRegistry()
        registry.add_operation_constraint(lambda meta, op: op is not EntityOperation.DELETE)

        assert registry.is_permitted(customer_meta, EntityOperation.READ)
        assert not registry.is_permitted(customer_meta, EntityOperation.DELETE)

    def test_all_predicates_must_permit(self, customer_meta):
        registry = AccessConstraintsRegistry()
        registry.add_operation_constraint(lambda meta, op: True)
        registry.add_operation_constraint(lambda meta, op: meta.name != "test_Customer")

        assert not registry.is_permitted(customer_meta, EntityOperation.READ)

    def test_check_permitted_raises(self, customer_meta):
        registry = AccessConstraintsRegistry()
        registry.add_operation_constraint(lambda meta, op: False)

        with pytest.raises(AccessDeniedError) as exc_info:
            registry.check_permitted(customer_meta, EntityOperation.UPDATE)

        assert exc_info.value.entity_type == "test_Customer"
        assert exc_info.value.operation == "update"


class TestRowConstraints:
    def test_conditions_per_entity(self):
        registry = AccessConstraintsRegistry()
        registry.add_row_constraint(Customer, lambda: Customer.region == "eu")

        assert len(registry.row_conditions(Customer)) == 1
        assert registry.row_conditions(Country) == []

    def test_conditions_built_lazily(self):
        registry = AccessConstraintsRegistry()
        current = {"region": "eu"}
        registry.add_row_constraint(Customer, lambda: Customer.region == current["region"])

        current["region"] = "us"
        (condition,) = registry.row_conditions(Customer)

        assert condition.right.value == "us"
