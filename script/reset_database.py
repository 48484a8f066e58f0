#!/usr/bin/env python3
"""
Database Reset Script
Reset the ticketing PostgreSQL database

Features:
1. Drop & Recreate Database - completely wipe the database
2. Run Alembic Migrations - create the ticketing schema, tables and routines

Notes:
- This script only resets database structure, does not seed demo data
- To seed demo data, start the API and call `POST /seed`
"""

import sys

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from src.platform.config.core_setting import settings
from src.platform.constant.path import ALEMBIC_INI


def _parse_db_connection(database_url: str) -> tuple[str, str]:
    """Parse database URL and return (server_url, db_name)"""
    server_url, db_name = database_url.rsplit('/', 1)
    return server_url, db_name


def _terminate_connections(conn: Connection, db_name: str) -> None:
    """Terminate all connections to the specified database"""
    conn.execute(
        text(
            'SELECT pg_terminate_backend(pid) FROM pg_stat_activity '
            'WHERE datname = :db_name AND pid <> pg_backend_pid()'
        ),
        {'db_name': db_name},
    )


def _drop_and_create_db(server_url: str, db_name: str) -> None:
    """Drop and recreate database"""
    admin_engine = create_engine(f'{server_url}/postgres', isolation_level='AUTOCOMMIT')

    try:
        with admin_engine.connect() as conn:
            _terminate_connections(conn, db_name)

            conn.execute(text(f'DROP DATABASE IF EXISTS "{db_name}"'))
            print(f"   ✅ Database '{db_name}' dropped")

            conn.execute(text(f'CREATE DATABASE "{db_name}"'))
            print(f"   ✅ Database '{db_name}' created")
    finally:
        admin_engine.dispose()


def _run_alembic_migrations(sync_url: str) -> None:
    """Run Alembic migrations"""
    print("   🔄 Running 'alembic upgrade head'...")

    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option('sqlalchemy.url', sync_url)
    command.upgrade(alembic_cfg, 'head')

    print('   ✅ Database migrations completed')


def drop_and_recreate_database() -> None:
    """Completely drop and recreate database"""
    sync_url = settings.DATABASE_URL_SYNC
    server_url, db_name = _parse_db_connection(sync_url)

    print(f'Database name: {db_name}')

    print('🗑️ Dropping database...')
    _drop_and_create_db(server_url, db_name)

    print('🏗️ Running database migrations...')
    _run_alembic_migrations(sync_url)
    print('Database recreation completed!')


def main() -> None:
    print('🔄 Starting database reset...')
    print('=' * 50)

    try:
        drop_and_recreate_database()
    except (SQLAlchemyError, OSError) as e:
        print(f'❌ Reset failed: {e}')
        sys.exit(1)

    print('=' * 50)
    print('✅ Database reset completed!')


if __name__ == '__main__':
    main()
