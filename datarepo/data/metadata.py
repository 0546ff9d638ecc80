"""Entity metadata.

Resolves mapped entity classes into ``MetaClass`` descriptors using the
SQLAlchemy mapper registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper

from datarepo.data.fetch_plan import FetchPlanRepository
from datarepo.exceptions import MetadataError
from datarepo.shared.utils.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class MetaClass:
    """Descriptor of a mapped entity class.

    Attributes:
        name: Entity name (``__entity_name__`` or the class name)
        entity_class: The mapped class
        primary_key: Name of the primary key attribute
        instance_name_properties: Properties that make up the instance name
    """

    name: str
    entity_class: type
    primary_key: str
    instance_name_properties: tuple[str, ...] = ()

    @property
    def mapper(self) -> Mapper:
        return sa_inspect(self.entity_class)

    def primary_key_column(self) -> Any:
        return getattr(self.entity_class, self.primary_key)

    def get_id(self, entity: Any) -> Any:
        """Return the primary key value of an instance."""
        return getattr(entity, self.primary_key)


@dataclass(frozen=True)
class Id(Generic[E]):
    """Typed reference to an entity by its identifier."""

    value: Any
    entity_class: type[E]

    @classmethod
    def of(cls, value: Any, entity_class: type[E]) -> Id[E]:
        if value is None:
            raise MetadataError("Id value must not be None", entity=entity_class.__name__)
        return cls(value, entity_class)


class Metadata:
    """Registry of entity meta-classes and fetch plans."""

    def __init__(self, fetch_plans: FetchPlanRepository | None = None) -> None:
        self.fetch_plans = fetch_plans or FetchPlanRepository()
        self._classes: dict[type, MetaClass] = {}
        self._names: dict[str, MetaClass] = {}

    def register(self, entity_class: type) -> MetaClass:
        """Register a mapped class and return its meta-class."""
        try:
            mapper = sa_inspect(entity_class)
        except NoInspectionAvailable as e:
            raise MetadataError(
                f"{entity_class.__name__} is not a mapped entity class",
                entity=entity_class.__name__,
            ) from e

        primary_keys = mapper.primary_key
        if len(primary_keys) != 1:
            raise MetadataError(
                "Only entities with a single-column primary key are supported",
                entity=entity_class.__name__,
            )

        meta_class = MetaClass(
            name=getattr(entity_class, "__entity_name__", entity_class.__name__),
            entity_class=entity_class,
            primary_key=mapper.get_property_by_column(primary_keys[0]).key,
            instance_name_properties=tuple(getattr(entity_class, "__instance_name__", ())),
        )
        self._classes[entity_class] = meta_class
        self._names[meta_class.name] = meta_class
        logger.debug("entity_registered", entity=meta_class.name)
        return meta_class

    def get_class(self, entity: type | str) -> MetaClass:
        """Get the meta-class for an entity class or entity name.

        Classes are registered on first use; names must belong to an
        already registered class.
        """
        if isinstance(entity, str):
            meta_class = self._names.get(entity)
            if meta_class is None:
                raise MetadataError(f"Entity '{entity}' is not registered", entity=entity)
            return meta_class

        meta_class = self._classes.get(entity)
        if meta_class is None:
            meta_class = self.register(entity)
        return meta_class

    def find_class(self, entity: type | str) -> MetaClass | None:
        try:
            return self.get_class(entity)
        except MetadataError:
            return None

    def create(self, entity_class: type[E]) -> E:
        """Instantiate a new, transient entity."""
        self.get_class(entity_class)
        return entity_class()


__all__ = ["Id", "MetaClass", "Metadata"]
