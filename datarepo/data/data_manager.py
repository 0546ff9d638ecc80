"""Data managers.

``UnconstrainedDataManager`` loads, counts, saves and removes entities
through SQLAlchemy without consulting access constraints. ``DataManager``
offers the same API with the application's access constraints applied and
exposes its unconstrained counterpart through ``unconstrained()``.

Every call opens its own session; writes run in their own transaction.
The session factory must be created with ``expire_on_commit=False`` (see
``datarepo.infrastructure.database.session.create_session_factory``) since
returned instances outlive their session.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy import Select, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from datarepo.data.constraints import AccessConstraintsRegistry, EntityOperation
from datarepo.data.fluent_loader import FluentLoader
from datarepo.data.load_context import LoadContext
from datarepo.data.metadata import Id, MetaClass, Metadata
from datarepo.exceptions import EntityNotFoundError, TransactionError
from datarepo.shared.utils.logging import LoggerMixin

E = TypeVar("E")

SessionFactory = Callable[[], AsyncSession]


class UnconstrainedDataManager(LoggerMixin):
    """Data access facade that ignores access constraints."""

    def __init__(
        self,
        session_factory: SessionFactory,
        metadata: Metadata | None = None,
    ) -> None:
        """Initialize the data manager.

        Args:
            session_factory: Factory for async sessions
            metadata: Entity metadata registry (a new one by default)
        """
        self._session_factory = session_factory
        self.metadata = metadata or Metadata()

    @property
    def applies_constraints(self) -> bool:
        return False

    def unconstrained(self) -> UnconstrainedDataManager:
        return self

    def create(self, entity_class: type[E]) -> E:
        """Create a new, unsaved instance of ``entity_class``."""
        return self.metadata.create(entity_class)

    def load(self, entity_class: type[E]) -> FluentLoader[E]:
        """Start a fluent load of ``entity_class`` instances."""
        return FluentLoader(entity_class, self)

    # ===========================================
    # LOADING
    # ===========================================

    async def load_list(self, context: LoadContext) -> list[Any]:
        """Load all instances matching the context."""
        self._check_operation(context.meta_class, EntityOperation.READ)
        statement = self._build_select(context)

        async with self._session_factory() as session:
            result = await session.execute(statement)
            entities = list(result.scalars().all())

        query = context.query
        if context.ids and (query is None or not query.sort.is_sorted):
            entities = self._order_by_ids(context, entities)

        self.logger.debug(
            "entities_loaded",
            entity=context.meta_class.name,
            count=len(entities),
            constrained=self.applies_constraints,
        )
        return entities

    async def load_one(self, context: LoadContext) -> Any | None:
        """Load the first instance matching the context, or ``None``."""
        self._check_operation(context.meta_class, EntityOperation.READ)
        statement = self._build_select(context)

        async with self._session_factory() as session:
            result = await session.execute(statement)
            return result.scalars().first()

    async def get_count(self, context: LoadContext) -> int:
        """Count instances matching the context, ignoring paging and sort."""
        self._check_operation(context.meta_class, EntityOperation.READ)
        statement = (
            select(func.count())
            .select_from(context.entity_class)
            .where(*self._where_clauses(context))
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)
            return result.scalar() or 0

    # ===========================================
    # PERSISTENCE
    # ===========================================

    async def save(self, entity: E) -> E:
        """Insert or update an entity in its own transaction.

        Returns:
            The saved instance (a different object than ``entity``)

        Raises:
            EntityNotFoundError: If an existing row is hidden by row conditions
            AccessDeniedError: If the create or update is not permitted
            TransactionError: If the database rejects the change
        """
        meta_class = self.metadata.get_class(type(entity))
        entity_id = meta_class.get_id(entity)

        async with self._session_factory() as session:
            try:
                async with session.begin():
                    # The stored row, not the instance state, decides CREATE vs UPDATE
                    operation = await self._classify_save(session, meta_class, entity_id)
                    saved = await session.merge(entity)
                    await session.flush()
            except SQLAlchemyError as e:
                raise TransactionError(f"Failed to save {meta_class.name}", original_error=e) from e

        self.logger.debug(
            "entity_saved",
            entity=meta_class.name,
            entity_id=str(meta_class.get_id(saved)),
            operation=operation.value,
        )
        return saved

    async def _classify_save(
        self, session: AsyncSession, meta_class: MetaClass, entity_id: Any
    ) -> EntityOperation:
        """Check the save of ``entity_id`` against the constraints.

        Raises:
            EntityNotFoundError: If the row exists but is not visible
            AccessDeniedError: If the operation is not permitted
        """
        operation = EntityOperation.CREATE
        if entity_id is not None:
            counted = select(func.count()).select_from(meta_class.entity_class)
            key = meta_class.primary_key_column() == entity_id
            stored = await session.scalar(counted.where(key))
            if stored:
                operation = EntityOperation.UPDATE
                conditions = self._row_conditions(meta_class.entity_class)
                if conditions:
                    visible = await session.scalar(counted.where(key, *conditions))
                    if not visible:
                        raise EntityNotFoundError(meta_class.name, entity_id)
        self._check_operation(meta_class, operation)
        return operation

    async def remove(self, target: Any) -> None:
        """Remove an entity, given the instance or an ``Id``.

        Raises:
            EntityNotFoundError: If the entity does not exist (or is not visible)
            TransactionError: If the database rejects the change
        """
        if isinstance(target, Id):
            meta_class = self.metadata.get_class(target.entity_class)
            entity_id = target.value
        else:
            meta_class = self.metadata.get_class(type(target))
            entity_id = meta_class.get_id(target)
        self._check_operation(meta_class, EntityOperation.DELETE)

        statement = select(meta_class.entity_class).where(
            meta_class.primary_key_column() == entity_id,
            *self._row_conditions(meta_class.entity_class),
        )

        async with self._session_factory() as session:
            try:
                async with session.begin():
                    instance = (await session.execute(statement)).scalars().first()
                    if instance is None:
                        raise EntityNotFoundError(meta_class.name, entity_id)
                    await session.delete(instance)
            except SQLAlchemyError as e:
                raise TransactionError(
                    f"Failed to remove {meta_class.name}", original_error=e
                ) from e

        self.logger.debug("entity_removed", entity=meta_class.name, entity_id=str(entity_id))

    # ===========================================
    # CONSTRAINT HOOKS
    # ===========================================

    def _check_operation(self, meta_class: MetaClass, operation: EntityOperation) -> None:
        """Unconstrained access permits every operation."""

    def _row_conditions(self, entity_class: type) -> list[ColumnElement[Any]]:
        return []

    # ===========================================
    # STATEMENT BUILDING
    # ===========================================

    def _where_clauses(self, context: LoadContext) -> list[ColumnElement[Any]]:
        meta_class = context.meta_class
        clauses: list[ColumnElement[Any]] = []

        if context.id is not None:
            clauses.append(meta_class.primary_key_column() == context.id)
        if context.ids:
            clauses.append(meta_class.primary_key_column().in_(context.ids))

        query = context.query
        if query is not None and query.query_string:
            condition = text(query.query_string)
            if query.parameters:
                condition = condition.bindparams(**query.parameters)
            clauses.append(condition)

        clauses.extend(self._row_conditions(meta_class.entity_class))
        return clauses

    def _build_select(self, context: LoadContext) -> Select:
        entity_class = context.entity_class
        statement = select(entity_class).where(*self._where_clauses(context))

        if context.fetch_plan is not None:
            statement = statement.options(*context.fetch_plan.loader_options())

        query = context.query
        if query is not None:
            if query.sort.is_sorted:
                statement = statement.order_by(*query.sort.to_clauses(entity_class))
            if query.first_result:
                statement = statement.offset(query.first_result)
            if query.max_results:
                statement = statement.limit(query.max_results)
        return statement

    @staticmethod
    def _order_by_ids(context: LoadContext, entities: list[Any]) -> list[Any]:
        by_id = {context.meta_class.get_id(entity): entity for entity in entities}
        return [by_id[entity_id] for entity_id in dict.fromkeys(context.ids) if entity_id in by_id]


class DataManager(UnconstrainedDataManager):
    """Data access facade that applies access constraints."""

    def __init__(
        self,
        session_factory: SessionFactory,
        metadata: Metadata | None = None,
        constraints: AccessConstraintsRegistry | None = None,
    ) -> None:
        """Initialize the data manager.

        Args:
            session_factory: Factory for async sessions
            metadata: Entity metadata registry (a new one by default)
            constraints: Access constraints to apply (none by default)
        """
        super().__init__(session_factory, metadata)
        self.constraints = constraints or AccessConstraintsRegistry()
        self._unconstrained = UnconstrainedDataManager(session_factory, self.metadata)

    @property
    def applies_constraints(self) -> bool:
        return True

    def unconstrained(self) -> UnconstrainedDataManager:
        """Return a data manager sharing sessions and metadata, without constraints."""
        return self._unconstrained

    def _check_operation(self, meta_class: MetaClass, operation: EntityOperation) -> None:
        self.constraints.check_permitted(meta_class, operation)

    def _row_conditions(self, entity_class: type) -> list[ColumnElement[Any]]:
        return self.constraints.row_conditions(entity_class)


__all__ = ["DataManager", "UnconstrainedDataManager"]
