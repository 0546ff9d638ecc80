"""Unit tests for CRUD method metadata and @apply_constraints resolution."""

import asyncio

import pytest

from datarepo.repositories import DataRepository, apply_constraints
from datarepo.repositories.support.method_metadata import (
    CrudMethodMetadata,
    CrudMethodMetadataAccessor,
    crud_method_metadata_for,
    determine_apply_constraints,
)
from tests.factories.entities import Customer
from tests.factories.repositories import CustomerRepository, SystemCustomerRepository


class TestDetermineApplyConstraints:
    def test_default_applies_constraints(self):
        assert determine_apply_constraints(CustomerRepository.find_all, CustomerRepository) is True

    def test_method_annotation(self):
        method = CustomerRepository.find_all_in_region_unconstrained
        assert determine_apply_constraints(method, CustomerRepository) is False

    def test_interface_annotation(self):
        method = SystemCustomerRepository.find_all
        assert determine_apply_constraints(method, SystemCustomerRepository) is False

    def test_method_overrides_interface(self):
        method = SystemCustomerRepository.count
        assert determine_apply_constraints(method, SystemCustomerRepository) is True

    def test_inherited_interface_annotation(self):
        class NightlyJobRepository(SystemCustomerRepository):
            pass

        method = NightlyJobRepository.save
        assert determine_apply_constraints(method, NightlyJobRepository) is False

    def test_same_named_method_up_the_hierarchy(self):
        """A bare override keeps the annotation of the method it overrides."""

        class ReportingRepository(SystemCustomerRepository):
            async def count(self) -> int:
                ...

        method = ReportingRepository.count
        assert determine_apply_constraints(method, ReportingRepository) is True

    def test_configured_default(self, monkeypatch):
        monkeypatch.setenv("DATAREPO_APPLY_CONSTRAINTS_BY_DEFAULT", "false")

        class PlainRepository(DataRepository[Customer, int]):
            pass

        assert determine_apply_constraints(PlainRepository.find_all, PlainRepository) is False

    def test_metadata_for(self):
        metadata = crud_method_metadata_for(SystemCustomerRepository.save, SystemCustomerRepository)
        assert metadata == CrudMethodMetadata(apply_constraints=False)


class TestApplyConstraintsDecorator:
    def test_default_value_is_true(self):
        @apply_constraints()
        def method():
            pass

        assert method.__apply_constraints__ is True


class TestCrudMethodMetadataAccessor:
    def test_default_outside_calls(self):
        accessor = CrudMethodMetadataAccessor()
        assert accessor.get_crud_method_metadata() == CrudMethodMetadata(apply_constraints=True)

    def test_explicit_default(self):
        accessor = CrudMethodMetadataAccessor(default=CrudMethodMetadata(False))
        assert accessor.get_crud_method_metadata().apply_constraints is False

    def test_bind_and_restore(self):
        accessor = CrudMethodMetadataAccessor()
        outer = CrudMethodMetadata(False)
        inner = CrudMethodMetadata(True)

        with accessor.bind(outer):
            with accessor.bind(inner):
                assert accessor.get_crud_method_metadata() is inner
            assert accessor.get_crud_method_metadata() is outer
        assert accessor.get_crud_method_metadata().apply_constraints is True

    def test_restored_after_error(self):
        accessor = CrudMethodMetadataAccessor()

        with pytest.raises(RuntimeError):
            with accessor.bind(CrudMethodMetadata(False)):
                raise RuntimeError("boom")

        assert accessor.get_crud_method_metadata().apply_constraints is True

    @pytest.mark.asyncio
    async def test_concurrent_tasks_are_isolated(self):
        """Bindings in one task are not visible to another."""
        accessor = CrudMethodMetadataAccessor()
        seen = {}

        async def unconstrained_call():
            with accessor.bind(CrudMethodMetadata(False)):
                await asyncio.sleep(0.01)
                seen["unconstrained"] = accessor.get_crud_method_metadata().apply_constraints

        async def plain_call():
            await asyncio.sleep(0.005)
            seen["plain"] = accessor.get_crud_method_metadata().apply_constraints

        await asyncio.gather(unconstrained_call(), plain_call())

        assert seen == {"unconstrained": False, "plain": True}
