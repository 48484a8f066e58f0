"""Alembic environment for the ticketing schema.

The connection URL is taken from Settings (DATABASE_URL_SYNC) unless the
caller already set sqlalchemy.url on the Config, as the test suite does.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool, text

from alembic import context

from src.platform.config.core_setting import settings
from src.platform.database.db_setting import Base

# Import models so autogenerate sees every table
import src.service.ticketing.driven_adapter.model  # noqa: E402, F401


config = context.config

if not config.get_main_option('sqlalchemy.url'):
    config.set_main_option('sqlalchemy.url', settings.DATABASE_URL_SYNC)

# Python logging from .ini file (skipped when driven programmatically without an ini)
if config.config_file_name is not None and config.attributes.get('configure_logger', True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (SQL script output only)."""
    context.configure(
        url=config.get_main_option('sqlalchemy.url'),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={'paramstyle': 'named'},
        include_schemas=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode (live database connection)."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix='sqlalchemy.',
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        # alembic_version lives in the ticketing schema, which must exist first
        connection.execute(text(f'CREATE SCHEMA IF NOT EXISTS {settings.DB_SCHEMA}'))
        connection.commit()

        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_schemas=True,
            version_table_schema=settings.DB_SCHEMA,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
