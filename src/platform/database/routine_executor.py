"""
Typed executor for server-side routines (scalar functions, set-returning
functions and procedures).

A Routine describes a database routine by schema, name and typed parameter
list. Statement text is rendered only from those validated identifiers and
named placeholders; caller-supplied values travel exclusively as bound
parameters, whatever the routine kind.

Usage:
    tickets_left = Routine(
        schema='ticketing',
        name='tickets_left',
        kind=RoutineKind.SCALAR,
        params=(RoutineParam('ticket_type_id', 'uuid'),),
    )
    executor = RoutineExecutor(session)
    value = await executor.fetch_scalar(tickets_left, {'ticket_type_id': some_id})
"""

import asyncio
from collections.abc import Callable, Mapping
from enum import StrEnum
import re
from typing import Any, TypeVar
import uuid

import attrs
from sqlalchemy import exc as sa_exc, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import TextClause

from src.platform.database.db_error_translator import translate_db_error
from src.platform.exception.exceptions import QueryShapeError, ValidationError
from src.platform.logging.loguru_io import Logger


_IDENTIFIER = re.compile(r'^[a-z_][a-z0-9_]*$')
# e.g. uuid, integer, numeric(12, 2), text[], timestamp with time zone
_SQL_TYPE = re.compile(r'^[a-z][a-z0-9_ ]*(\(\d+(,\s*\d+)?\))?(\[\])?$')

DB_ERRORS = (sa_exc.SQLAlchemyError, OSError, asyncio.TimeoutError)

_T = TypeVar('_T')


class RoutineKind(StrEnum):
    SCALAR = 'scalar'
    TABLE = 'table'
    PROCEDURE = 'procedure'


def _check_identifier(instance: Any, attribute: 'attrs.Attribute[str]', value: str) -> None:
    if not _IDENTIFIER.match(value):
        raise ValueError(f'{attribute.name} must be a lowercase SQL identifier, got {value!r}')


def _check_sql_type(instance: Any, attribute: 'attrs.Attribute[str]', value: str) -> None:
    if not _SQL_TYPE.match(value):
        raise ValueError(f'Unsupported SQL type {value!r}')


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def _int_of_width(bits: int) -> Callable[[Any], int]:
    low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1

    def _to_int(value: Any) -> int:
        # bool is an int subclass but never a meaningful count/delta
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f'expected int, got {type(value).__name__}')
        if not low <= value <= high:
            raise ValueError(f'{value} is outside {low}..{high}')
        return value

    return _to_int


_COERCERS: dict[str, Callable[[Any], Any]] = {
    'uuid': _to_uuid,
    'integer': _int_of_width(32),
    'bigint': _int_of_width(64),
}


@attrs.frozen
class RoutineParam:
    name: str = attrs.field(validator=_check_identifier)
    sql_type: str = attrs.field(validator=_check_sql_type)

    def placeholder(self) -> str:
        return f'CAST(:{self.name} AS {self.sql_type})'

    def coerce(self, value: Any) -> Any:
        if value is None:
            raise ValidationError(f'Parameter {self.name} is required')
        coercer = _COERCERS.get(self.sql_type)
        if coercer is None:
            return value
        try:
            return coercer(value)
        except (TypeError, ValueError, AttributeError) as e:
            raise ValidationError(
                f'Parameter {self.name} must be a valid {self.sql_type}: {e}'
            ) from e


@attrs.frozen
class Routine:
    schema: str = attrs.field(validator=_check_identifier)
    name: str = attrs.field(validator=_check_identifier)
    kind: RoutineKind
    params: tuple[RoutineParam, ...] = attrs.field(default=(), converter=tuple)

    @property
    def qualified_name(self) -> str:
        return f'{self.schema}.{self.name}'

    def render(self) -> str:
        arguments = ', '.join(param.placeholder() for param in self.params)
        call = f'{self.qualified_name}({arguments})'
        if self.kind is RoutineKind.SCALAR:
            return f'SELECT {call} AS value'
        if self.kind is RoutineKind.TABLE:
            return f'SELECT * FROM {call}'
        return f'CALL {call}'

    def bind(self, values: Mapping[str, Any]) -> TextClause:
        expected = [param.name for param in self.params]
        missing = [name for name in expected if name not in values]
        unexpected = sorted(set(values) - set(expected))
        if missing:
            raise ValidationError(f'Missing parameter(s) for {self.qualified_name}: {missing}')
        if unexpected:
            raise ValidationError(
                f'Unexpected parameter(s) for {self.qualified_name}: {unexpected}'
            )

        bound = {param.name: param.coerce(values[param.name]) for param in self.params}
        return text(self.render()).bindparams(**bound)


def hydrate(shape: type[_T], mapping: Mapping[str, Any]) -> _T:
    """Build an attrs projection from a row mapping, matching columns by name."""
    fields = [field.name for field in attrs.fields(shape)]  # type: ignore[arg-type]
    columns = list(mapping.keys())
    missing = [name for name in fields if name not in mapping]
    extra = [name for name in columns if name not in fields]
    if missing or extra:
        raise QueryShapeError(
            f'Columns {columns} do not match {shape.__name__} fields {fields} '
            f'(missing={missing}, extra={extra})'
        )
    return shape(**{name: mapping[name] for name in fields})


class RoutineExecutor:
    """Runs Routines on a caller-owned AsyncSession and returns typed results."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _ensure_kind(routine: Routine, kind: RoutineKind) -> None:
        if routine.kind is not kind:
            raise ValueError(f'{routine.qualified_name} is a {routine.kind} routine, not {kind}')

    @Logger.io
    async def fetch_scalar(
        self,
        routine: Routine,
        params: Mapping[str, Any],
        *,
        result_type: Callable[[Any], _T] = int,  # type: ignore[assignment]
    ) -> _T | None:
        """
        Return the single value produced by a scalar routine.

        A NULL result is returned as None; deciding what absence means is left
        to the caller. Anything other than exactly one row is a QueryShapeError.
        """
        self._ensure_kind(routine, RoutineKind.SCALAR)
        statement = routine.bind(params)
        try:
            result = await self.session.execute(statement)
            rows = result.all()
        except DB_ERRORS as e:
            raise translate_db_error(e) from e

        if len(rows) != 1:
            raise QueryShapeError(
                f'{routine.qualified_name} returned {len(rows)} rows, expected exactly 1'
            )
        row = rows[0]
        if len(row) != 1:
            raise QueryShapeError(
                f'{routine.qualified_name} returned {len(row)} columns, expected exactly 1'
            )

        value = row[0]
        if value is None:
            return None
        try:
            return result_type(value)
        except (TypeError, ValueError) as e:
            raise QueryShapeError(
                f'{routine.qualified_name} returned {value!r}, not convertible to '
                f'{getattr(result_type, "__name__", result_type)}'
            ) from e

    @Logger.io
    async def fetch_all(
        self, routine: Routine, params: Mapping[str, Any], *, shape: type[_T]
    ) -> list[_T]:
        """Return every row of a set-returning routine as `shape` instances (possibly [])."""
        self._ensure_kind(routine, RoutineKind.TABLE)
        statement = routine.bind(params)
        try:
            result = await self.session.execute(statement)
            mappings = result.mappings().all()
        except DB_ERRORS as e:
            raise translate_db_error(e) from e

        return [hydrate(shape, mapping) for mapping in mappings]

    @Logger.io
    async def call_procedure(self, routine: Routine, params: Mapping[str, Any]) -> None:
        """Invoke a procedure and commit; on failure nothing it did stays visible."""
        self._ensure_kind(routine, RoutineKind.PROCEDURE)
        statement = routine.bind(params)
        try:
            await self.session.execute(statement)
            await self.session.commit()
        except DB_ERRORS as e:
            await self._rollback_after_failure(routine)
            raise translate_db_error(e) from e

    async def _rollback_after_failure(self, routine: Routine) -> None:
        try:
            await self.session.rollback()
        except DB_ERRORS as rollback_error:
            # The original failure is the one reported to the caller
            Logger.base.warning(
                f'⚠️ [ROUTINE] Rollback after {routine.qualified_name} failed: {rollback_error}'
            )
