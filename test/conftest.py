"""
Test Configuration and Fixtures

This module provides:
- Test database setup (create database, reset schema, alembic upgrade head)
- Per-test table cleanup for integration tests
- Shared fixtures for sessions, units of work and the HTTP client

Architecture:
- Unit tests (@pytest.mark.unit): no database, collaborators are mocked
- Integration tests: real PostgreSQL, skipped when it is not reachable
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings reads POSTGRES_DB at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    if worker_id == 'master':
        os.environ['POSTGRES_DB'] = 'ticketing_test_db'
    else:
        os.environ['POSTGRES_DB'] = f'ticketing_test_db_{worker_id}'

    # Create test log directory
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Pool size settings for tests
    os.environ.setdefault('DB_POOL_SIZE', '2')
    os.environ.setdefault('DB_POOL_MAX_OVERFLOW', '2')


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import AsyncGenerator, Generator  # noqa: E402
from typing import Any  # noqa: E402

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from dotenv import load_dotenv  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine, text  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402

from src.platform.config.core_setting import settings  # noqa: E402
from src.platform.constant.path import ALEMBIC_INI  # noqa: E402


TABLES = ('order_items', 'orders', 'ticket_types')


# =============================================================================
# Pytest Hooks: Detect test type and setup accordingly
# =============================================================================
def _is_unit_test_only_run(config: pytest.Config) -> bool:
    markexpr = config.getoption('markexpr', default='')
    if markexpr and 'unit' in str(markexpr) and 'not unit' not in str(markexpr):
        return True

    args = config.args or []
    test_paths = [arg for arg in args if arg and not arg.startswith('-')]
    return bool(test_paths and all('/unit/' in path or '\\unit\\' in path for path in test_paths))


_database_unavailable_reason: str | None = 'database setup has not run'


def pytest_sessionstart(session: pytest.Session) -> None:
    global _database_unavailable_reason
    if _is_unit_test_only_run(session.config):
        return

    try:
        _setup_test_database()
    except (SQLAlchemyError, OSError) as e:
        _database_unavailable_reason = f'PostgreSQL is not reachable: {e}'
    else:
        _database_unavailable_reason = None


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        markers = [m.name for m in item.iter_markers()]
        if 'unit' not in markers:
            item.fixturenames.insert(0, 'clean_database')


# =============================================================================
# Database Configuration
# =============================================================================
def _get_db_config() -> dict[str, str]:
    env_file = '.env' if Path('.env').exists() else '.env.example'
    load_dotenv(env_file)

    return {
        'user': os.getenv('POSTGRES_USER', 'postgres'),
        'password': os.getenv('POSTGRES_PASSWORD', 'postgres'),
        'host': os.getenv('POSTGRES_SERVER', 'localhost'),
        'port': os.getenv('POSTGRES_PORT', '5432'),
        'test_db': os.getenv('POSTGRES_DB', 'ticketing_test_db'),
    }


def _get_test_database_url(driver: str = 'postgresql+asyncpg', db_name: str | None = None) -> str:
    cfg = _get_db_config()
    return (
        f'{driver}://{cfg["user"]}:{cfg["password"]}'
        f'@{cfg["host"]}:{cfg["port"]}/{db_name or cfg["test_db"]}'
    )


# =============================================================================
# Database Setup and Cleanup
# =============================================================================
def _setup_test_database() -> None:
    cfg = _get_db_config()
    connect_args = {'connect_timeout': 3}

    # Create database if not exists
    admin_engine = create_engine(
        _get_test_database_url('postgresql+psycopg2', 'postgres'),
        isolation_level='AUTOCOMMIT',
        connect_args=connect_args,
    )
    try:
        with admin_engine.connect() as conn:
            exists = conn.execute(
                text('SELECT 1 FROM pg_database WHERE datname = :name'),
                {'name': cfg['test_db']},
            ).fetchone()
            if not exists:
                conn.execute(text(f'CREATE DATABASE "{cfg["test_db"]}"'))
    finally:
        admin_engine.dispose()

    # Reset schema and run migrations
    sync_url = _get_test_database_url('postgresql+psycopg2')
    reset_engine = create_engine(sync_url, connect_args=connect_args)
    try:
        with reset_engine.begin() as conn:
            conn.execute(text(f'DROP SCHEMA IF EXISTS {settings.DB_SCHEMA} CASCADE'))
    finally:
        reset_engine.dispose()

    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option('sqlalchemy.url', sync_url)
    alembic_cfg.attributes['configure_logger'] = False
    command.upgrade(alembic_cfg, 'head')


async def _clean_all_tables() -> None:
    engine = create_async_engine(_get_test_database_url())
    try:
        async with engine.begin() as conn:
            qualified = ', '.join(f'{settings.DB_SCHEMA}.{table}' for table in TABLES)
            await conn.execute(text(f'TRUNCATE {qualified} CASCADE'))
    finally:
        await engine.dispose()


# =============================================================================
# Integration Test Fixtures
# =============================================================================
@pytest.fixture(scope='function')
async def clean_database() -> AsyncGenerator[None, None]:
    if _database_unavailable_reason is not None:
        pytest.skip(_database_unavailable_reason)

    await _clean_all_tables()
    yield

    import asyncio

    from src.platform.database.orm_db_setting import _engine_manager

    # Only dispose the engine created on this test's loop; the TestClient
    # lifespan disposes its own on shutdown
    if _engine_manager._loop is asyncio.get_running_loop():
        await _engine_manager.dispose()


@pytest.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    from src.platform.database.db_setting import Database

    async with Database().session() as db_session:
        yield db_session


@pytest.fixture
def uow(session: AsyncSession) -> Any:
    from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
    from src.service.ticketing.driven_adapter.repo.ticketing_entity_mapping import (
        TICKETING_ENTITY_MAPPINGS,
    )

    return SqlAlchemyUnitOfWork(session, mappings=TICKETING_ENTITY_MAPPINGS)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    from test.test_main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
