"""Customer test data factory."""

from dataclasses import dataclass, field
from typing import Any

from tests.factories.entities import Customer, PurchaseOrder


@dataclass
class CustomerFactory:
    """Factory for creating transient Customer instances."""

    _counter: int = field(default=0, repr=False)

    @classmethod
    def create(
        cls,
        name: str | None = None,
        email: str | None = None,
        status: str = "active",
        region: str = "eu",
        orders: list[PurchaseOrder] | None = None,
        **kwargs: Any,
    ) -> Customer:
        """Create a Customer instance with sensible defaults."""
        cls._counter = getattr(cls, "_counter", 0) + 1

        return Customer(
            name=name or f"customer_{cls._counter}",
            email=email or f"customer_{cls._counter}@example.com",
            status=status,
            region=region,
            orders=orders or [],
            **kwargs,
        )

    @classmethod
    def create_batch(cls, count: int, **kwargs: Any) -> list[Customer]:
        """Create several customers sharing the given overrides."""
        return [cls.create(**kwargs) for _ in range(count)]


@dataclass
class PurchaseOrderFactory:
    """Factory for creating transient PurchaseOrder instances."""

    _counter: int = field(default=0, repr=False)

    @classmethod
    def create(cls, number: str | None = None, amount: int = 100, **kwargs: Any) -> PurchaseOrder:
        cls._counter = getattr(cls, "_counter", 0) + 1

        return PurchaseOrder(
            number=number or f"PO-{cls._counter:05d}",
            amount=amount,
            **kwargs,
        )
