"""Test data factories and test entities.

This module provides mapped entities, repository interfaces and factory
classes for generating test data.
"""

from tests.factories.customer_factory import CustomerFactory, PurchaseOrderFactory
from tests.factories.entities import Base, Country, Customer, PurchaseOrder

__all__ = [
    "Base",
    "Country",
    "Customer",
    "CustomerFactory",
    "PurchaseOrder",
    "PurchaseOrderFactory",
]
