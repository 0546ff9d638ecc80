"""Unit tests for entity metadata."""

import pytest

from datarepo.data.metadata import Id, Metadata
from datarepo.exceptions import MetadataError
from tests.factories import Country, Customer, CustomerFactory


class NotAnEntity:
    pass


class TestMetadata:
    def test_register_uses_entity_name(self):
        meta_class = Metadata().register(Customer)

        assert meta_class.name == "test_Customer"
        assert meta_class.primary_key == "id"
        assert meta_class.instance_name_properties == ("name",)

    def test_register_defaults_to_class_name(self):
        meta_class = Metadata().register(Country)

        assert meta_class.name == "Country"
        assert meta_class.primary_key == "code"

    def test_get_class_registers_on_first_use(self):
        metadata = Metadata()

        assert metadata.find_class("test_Customer") is None
        meta_class = metadata.get_class(Customer)

        assert metadata.get_class("test_Customer") is meta_class
        assert metadata.get_class(Customer) is meta_class

    def test_unknown_name(self):
        with pytest.raises(MetadataError) as exc_info:
            Metadata().get_class("Nope")
        assert exc_info.value.entity == "Nope"

    def test_unmapped_class(self):
        with pytest.raises(MetadataError):
            Metadata().register(NotAnEntity)

        assert Metadata().find_class(NotAnEntity) is None

    def test_create_returns_transient_instance(self):
        customer = Metadata().create(Customer)

        assert isinstance(customer, Customer)
        assert customer.id is None

    def test_get_id(self):
        meta_class = Metadata().get_class(Customer)
        customer = CustomerFactory.create(id=17)

        assert meta_class.get_id(customer) == 17


class TestId:
    def test_of(self):
        assert Id.of("de", Country) == Id("de", Country)

    def test_none_rejected(self):
        with pytest.raises(MetadataError):
            Id.of(None, Customer)
