"""
Unit of Work Pattern - staged entity writes flushed in one transaction

Architecture:
- Use cases stage inserts, updates and deletes on the UoW
- commit() validates every staged entity, then flushes them in one transaction
- Each entity type is described by an EntityMapping (table, row mapper, invariants)
- Routine access shares the UoW session through `uow.ticketing_routine_repo`

A UoW instance belongs to a single logical caller; it is not safe to share
between concurrent tasks.
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Mapping, Sequence
from enum import StrEnum
from itertools import groupby
from typing import TYPE_CHECKING, Any

import attrs
from fastapi import Depends
from sqlalchemy import Table, delete, insert, update
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils.compat import uuid7

from src.platform.database.db_setting import get_async_session
from src.platform.database.db_error_translator import translate_db_error
from src.platform.database.routine_executor import DB_ERRORS
from src.platform.exception.exceptions import NotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger


if TYPE_CHECKING:
    from src.service.ticketing.app.interface.i_ticketing_routine_repo import (
        ITicketingRoutineRepo,
    )


class StagedAction(StrEnum):
    INSERT = 'insert'
    UPDATE = 'update'
    DELETE = 'delete'


def _no_children(entity: Any) -> Sequence[Any]:
    return ()


def assign_identity(entity: Any) -> None:
    """Give a new entity a time-ordered id so children can reference it before flush."""
    if getattr(entity, 'id', None) is None:
        entity.id = uuid7()


@attrs.frozen
class EntityMapping:
    """
    How one entity type is persisted.

    - to_row: entity -> column values; None values for `server_default_columns` are omitted
    - validate: raises ValidationError when the entity breaks its invariants
    - children: owned entities inserted right after the parent (deleted by FK cascade)
    - immutable_columns: never written by an update
    - returning: server-populated columns written back onto the entity after insert
    """

    table: Table
    to_row: Callable[[Any], dict[str, Any]]
    validate: Callable[[Any], None]
    children: Callable[[Any], Sequence[Any]] = _no_children
    immutable_columns: frozenset[str] = frozenset({'id'})
    server_default_columns: frozenset[str] = frozenset()
    returning: tuple[str, ...] = ()

    def insert_row(self, entity: Any) -> dict[str, Any]:
        row = self.to_row(entity)
        return {
            column: value
            for column, value in row.items()
            if not (value is None and column in self.server_default_columns)
        }

    def update_row(self, entity: Any) -> dict[str, Any]:
        return {
            column: value
            for column, value in self.to_row(entity).items()
            if column not in self.immutable_columns
        }


@attrs.frozen
class StagedOperation:
    action: StagedAction
    entity: Any


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work

    Responsibilities:
    - Track staged inserts/updates/deletes in registration order
    - Validate staged entities before touching storage
    - Commit all staged writes atomically, or none of them

    Usage:
        async with uow:
            uow.register(ticket_type)
            uow.register(order)  # order items are staged with it
            await uow.commit()
    """

    ticketing_routine_repo: ITicketingRoutineRepo

    def __init__(self) -> None:
        self._staged: list[StagedOperation] = []

    @property
    def staged(self) -> tuple[StagedOperation, ...]:
        return tuple(self._staged)

    def register(self, entity: Any) -> None:
        """Stage an insert. Owned children (e.g. order items) are inserted along with it."""
        self._stage(StagedAction.INSERT, entity)

    def register_update(self, entity: Any) -> None:
        self._stage(StagedAction.UPDATE, entity)

    def register_delete(self, entity: Any) -> None:
        self._stage(StagedAction.DELETE, entity)

    def _stage(self, action: StagedAction, entity: Any) -> None:
        self._ensure_supported(entity)
        if action is StagedAction.INSERT:
            assign_identity(entity)
        self._staged.append(StagedOperation(action=action, entity=entity))

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.rollback()

    async def commit(self) -> None:
        """
        Validate and flush every staged operation in one transaction.

        On failure nothing is persisted, the staged operations are kept and
        the translated error is raised. On success the staged list is cleared.
        """
        if not self._staged:
            return
        operations = self._expand(self._staged)
        self._validate(operations)
        await self._commit(operations)
        self._staged.clear()

    async def rollback(self) -> None:
        self._staged.clear()
        await self._rollback()

    @abc.abstractmethod
    def _ensure_supported(self, entity: Any) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _expand(self, staged: Sequence[StagedOperation]) -> list[StagedOperation]:
        raise NotImplementedError

    @abc.abstractmethod
    def _validate(self, operations: Sequence[StagedOperation]) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def _commit(self, operations: Sequence[StagedOperation]) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def _rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    Consecutive staged operations of the same kind against the same table are
    sent as one batched statement; inserts use RETURNING to write
    server-populated columns back onto the entities.
    """

    def __init__(self, session: AsyncSession, mappings: Mapping[type, EntityMapping]) -> None:
        super().__init__()
        self.session = session
        self.mappings = dict(mappings)

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.ticketing.driven_adapter.repo.ticketing_routine_repo_impl import (
            TicketingRoutineRepoImpl,
        )

        # Routine calls run on the same session as the staged writes
        self.ticketing_routine_repo = TicketingRoutineRepoImpl(session_factory=None)
        self.ticketing_routine_repo.session = self.session

        return await super().__aenter__()

    def mapping_for(self, entity: Any) -> EntityMapping:
        mapping = self.mappings.get(type(entity))
        if mapping is None:
            raise TypeError(f'No persistence mapping registered for {type(entity).__name__}')
        return mapping

    def _ensure_supported(self, entity: Any) -> None:
        self.mapping_for(entity)

    def _expand(self, staged: Sequence[StagedOperation]) -> list[StagedOperation]:
        operations: list[StagedOperation] = []
        for operation in staged:
            operations.append(operation)
            if operation.action is StagedAction.INSERT:
                for child in self.mapping_for(operation.entity).children(operation.entity):
                    assign_identity(child)
                    operations.append(StagedOperation(action=StagedAction.INSERT, entity=child))
        return operations

    def _validate(self, operations: Sequence[StagedOperation]) -> None:
        for operation in operations:
            if operation.action is StagedAction.DELETE:
                continue
            mapping = self.mapping_for(operation.entity)
            mapping.validate(operation.entity)

    @Logger.io(truncate_content=True)
    async def _commit(self, operations: Sequence[StagedOperation]) -> None:
        try:
            for (action, _table_name), group in groupby(
                operations,
                key=lambda op: (op.action, self.mapping_for(op.entity).table.fullname),
            ):
                batch = [op.entity for op in group]
                mapping = self.mapping_for(batch[0])
                if action is StagedAction.INSERT:
                    await self._insert(mapping, batch)
                elif action is StagedAction.UPDATE:
                    await self._update(mapping, batch)
                else:
                    await self._delete(mapping, batch)
            await self.session.commit()
        except (ValidationError, NotFoundError):
            await self._rollback_after_failure()
            raise
        except DB_ERRORS as e:
            await self._rollback_after_failure()
            raise translate_db_error(e) from e

    async def _insert(self, mapping: EntityMapping, entities: list[Any]) -> None:
        table = mapping.table
        rows = [mapping.insert_row(entity) for entity in entities]
        # executemany needs identical keys, so split on column set
        start = 0
        for _columns, chunk in groupby(rows, key=lambda row: tuple(sorted(row))):
            chunk_rows = list(chunk)
            chunk_entities = entities[start : start + len(chunk_rows)]
            start += len(chunk_rows)

            if not mapping.returning:
                await self.session.execute(insert(table), chunk_rows)
                continue

            statement = insert(table).returning(
                *(table.c[column] for column in mapping.returning),
                sort_by_parameter_order=True,
            )
            result = await self.session.execute(statement, chunk_rows)
            for entity, returned in zip(chunk_entities, result.mappings().all(), strict=True):
                for column in mapping.returning:
                    setattr(entity, column, returned[column])

    async def _update(self, mapping: EntityMapping, entities: list[Any]) -> None:
        table = mapping.table
        for entity in entities:
            result = await self.session.execute(
                update(table).where(table.c.id == entity.id).values(**mapping.update_row(entity))
            )
            if result.rowcount != 1:
                raise NotFoundError(f'{table.name} row {entity.id} does not exist')

    async def _delete(self, mapping: EntityMapping, entities: list[Any]) -> None:
        table = mapping.table
        ids = [entity.id for entity in entities]
        result = await self.session.execute(delete(table).where(table.c.id.in_(ids)))
        if result.rowcount != len(ids):
            raise NotFoundError(f'{table.name} rows {ids} do not all exist')

    async def _rollback(self) -> None:
        await self.session.rollback()

    async def _rollback_after_failure(self) -> None:
        try:
            await self._rollback()
        except DB_ERRORS as rollback_error:
            # The flush failure is the one reported to the caller
            Logger.base.warning(f'⚠️ [UOW] Rollback after failed commit failed: {rollback_error}')


def get_unit_of_work(
    session: AsyncSession = Depends(get_async_session),
) -> AbstractUnitOfWork:
    """
    FastAPI dependency for Unit of Work

    Usage:
        async def seed(uow: AbstractUnitOfWork = Depends(get_unit_of_work)):
            async with uow:
                uow.register(ticket_type)
                await uow.commit()
    """
    from src.service.ticketing.driven_adapter.repo.ticketing_entity_mapping import (
        TICKETING_ENTITY_MAPPINGS,
    )

    return SqlAlchemyUnitOfWork(session, mappings=TICKETING_ENTITY_MAPPINGS)
