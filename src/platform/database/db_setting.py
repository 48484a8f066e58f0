"""
Database configuration entry point

Re-exports the SQLAlchemy engine/session helpers from orm_db_setting.py
"""

from src.platform.database.orm_db_setting import (
    Base,
    Database,
    dispose_engine,
    get_async_session,
    get_engine,
    get_session_maker,
)

__all__ = [
    'Base',
    'Database',
    'dispose_engine',
    'get_async_session',
    'get_engine',
    'get_session_maker',
]
