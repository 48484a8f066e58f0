"""
Translate driver/SQLAlchemy failures into the platform error hierarchy.

SQLAlchemy wraps asyncpg exceptions in `DBAPIError`; the adapted exception
keeps the original asyncpg error as `__cause__`, and both expose the
PostgreSQL SQLSTATE. Classification is done on the SQLSTATE so that errors
raised inside server routines (`RAISE ... USING ERRCODE`) land in the same
buckets as the ones raised by table constraints.
"""

import asyncio

from sqlalchemy import exc as sa_exc

from src.platform.exception.exceptions import (
    ConnectivityError,
    ConstraintError,
    CustomBaseError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


NO_DATA_FOUND = 'P0002'
RAISE_EXCEPTION = 'P0001'

# SQLSTATE classes: 08 connection exception, 22 data exception, 23 integrity violation
_CONNECTION_CLASS = '08'
_DATA_EXCEPTION_CLASS = '22'
_INTEGRITY_CLASS = '23'
# admin_shutdown, crash_shutdown, cannot_connect_now
_SHUTDOWN_STATES = {'57P01', '57P02', '57P03'}


def _driver_error(error: sa_exc.DBAPIError) -> BaseException:
    orig = error.orig
    if orig is None:
        return error
    return orig.__cause__ if orig.__cause__ is not None else orig


def extract_sqlstate(error: BaseException) -> str | None:
    if isinstance(error, sa_exc.DBAPIError):
        for candidate in (_driver_error(error), error.orig):
            sqlstate = getattr(candidate, 'sqlstate', None) or getattr(candidate, 'pgcode', None)
            if sqlstate:
                return str(sqlstate)
        return None
    sqlstate = getattr(error, 'sqlstate', None)
    return str(sqlstate) if sqlstate else None


def extract_message(error: BaseException) -> str:
    """Message text of the underlying database error, without SQLAlchemy decoration."""
    if isinstance(error, sa_exc.DBAPIError):
        error = _driver_error(error)
    message = str(error).strip()
    return message or type(error).__name__


def translate_db_error(error: BaseException) -> CustomBaseError:
    """
    Map a storage failure to ValidationError, NotFoundError or a PersistenceError subclass.

    The caller is expected to `raise translate_db_error(e) from e`; the original
    error is additionally kept on PersistenceError.cause.
    """
    if isinstance(error, CustomBaseError):
        return error

    message = extract_message(error)

    if isinstance(error, (OSError, asyncio.TimeoutError)):
        return ConnectivityError(message, cause=error)

    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return ConnectivityError(message, cause=error)

    sqlstate = extract_sqlstate(error)
    if sqlstate is None:
        # asyncpg rejects unencodable arguments client-side (its DataError is a ValueError)
        if isinstance(error, sa_exc.DataError) or (
            isinstance(error, sa_exc.DBAPIError) and isinstance(_driver_error(error), ValueError)
        ):
            return ValidationError(message)
        if isinstance(error, (sa_exc.InterfaceError, sa_exc.OperationalError)):
            return ConnectivityError(message, cause=error)
        if isinstance(error, sa_exc.IntegrityError):
            return ConstraintError(message, cause=error)
        return PersistenceError(message, cause=error)

    if sqlstate == NO_DATA_FOUND:
        return NotFoundError(message)
    if sqlstate == RAISE_EXCEPTION or sqlstate.startswith(_INTEGRITY_CLASS):
        return ConstraintError(message, cause=error)
    if sqlstate.startswith(_DATA_EXCEPTION_CLASS):
        return ValidationError(message)
    if sqlstate.startswith(_CONNECTION_CLASS) or sqlstate in _SHUTDOWN_STATES:
        return ConnectivityError(message, cause=error)
    return PersistenceError(message, cause=error)
