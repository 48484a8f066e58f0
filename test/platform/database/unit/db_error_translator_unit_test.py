import asyncio

from asyncpg.exceptions._base import DataError as ClientDataError
import pytest
from sqlalchemy import exc as sa_exc

from src.platform.database.db_error_translator import extract_sqlstate, translate_db_error
from src.platform.exception.exceptions import (
    ConnectivityError,
    ConstraintError,
    NotFoundError,
    PersistenceError,
    QueryShapeError,
    ValidationError,
)


class FakeAsyncpgError(Exception):
    def __init__(self, message: str, sqlstate: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def _wrapped(sqlstate: str, message: str = 'db said no') -> sa_exc.DBAPIError:
    """Mimic SQLAlchemy's asyncpg adaptation: the adapted error chains to the asyncpg one."""
    driver_error = FakeAsyncpgError(message, sqlstate)
    adapted = Exception(f'<class FakeAsyncpgError>: {message}')
    adapted.__cause__ = driver_error
    return sa_exc.DBAPIError('SELECT 1', {}, adapted)


@pytest.mark.unit
class TestTranslateDbError:
    @pytest.mark.parametrize(
        ('sqlstate', 'expected'),
        [
            ('P0002', NotFoundError),
            ('P0001', ConstraintError),
            ('23514', ConstraintError),
            ('23503', ConstraintError),
            ('23505', ConstraintError),
            ('22P02', ValidationError),
            ('22003', ValidationError),
            ('08006', ConnectivityError),
            ('57P01', ConnectivityError),
            ('42P01', PersistenceError),
        ],
    )
    def test_sqlstate_classification(self, sqlstate: str, expected: type) -> None:
        translated = translate_db_error(_wrapped(sqlstate))

        assert type(translated) is expected

    def test_message_comes_from_driver_error(self) -> None:
        translated = translate_db_error(_wrapped('23514', 'quantity out of range'))

        assert translated.message == 'quantity out of range'

    def test_persistence_error_keeps_cause(self) -> None:
        error = _wrapped('23514')

        translated = translate_db_error(error)

        assert isinstance(translated, PersistenceError)
        assert translated.cause is error

    def test_sqlstate_read_from_chained_driver_error(self) -> None:
        assert extract_sqlstate(_wrapped('P0002')) == 'P0002'

    def test_os_error_is_connectivity(self) -> None:
        translated = translate_db_error(ConnectionRefusedError('connection refused'))

        assert isinstance(translated, ConnectivityError)
        assert translated.status_code == 503

    def test_timeout_is_connectivity(self) -> None:
        assert isinstance(translate_db_error(asyncio.TimeoutError()), ConnectivityError)

    def test_invalidated_connection_is_connectivity(self) -> None:
        error = sa_exc.DBAPIError(
            'SELECT 1', {}, Exception('server closed the connection'), connection_invalidated=True
        )

        assert isinstance(translate_db_error(error), ConnectivityError)

    def test_interface_error_without_sqlstate_is_connectivity(self) -> None:
        error = sa_exc.InterfaceError('SELECT 1', {}, Exception('connection is closed'))

        assert isinstance(translate_db_error(error), ConnectivityError)

    def test_integrity_error_without_sqlstate_is_constraint(self) -> None:
        error = sa_exc.IntegrityError('INSERT', {}, Exception('duplicate key'))

        assert isinstance(translate_db_error(error), ConstraintError)

    def test_platform_errors_pass_through(self) -> None:
        error = QueryShapeError('2 rows')

        assert translate_db_error(error) is error

    def test_argument_rejected_by_driver_is_validation_error(self) -> None:
        driver_error = ClientDataError('invalid input for query argument $1: out of int32 range')
        adapted = Exception(f'<class DataError>: {driver_error}')
        adapted.__cause__ = driver_error
        error = sa_exc.InterfaceError('CALL ...', {}, adapted)

        translated = translate_db_error(error)

        assert isinstance(translated, ValidationError)
        assert translated.status_code == 400
        assert 'int32' in translated.message

    def test_data_error_without_sqlstate_is_validation_error(self) -> None:
        error = sa_exc.DataError('SELECT 1', {}, Exception('value too long'))

        assert isinstance(translate_db_error(error), ValidationError)
