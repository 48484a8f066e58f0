"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.database.db_setting import Database
from src.service.ticketing.driven_adapter.repo.ticketing_routine_repo_impl import (
    TicketingRoutineRepoImpl,
)


class Container(containers.DeclarativeContainer):
    # Database (sessions come from the loop-aware AsyncEngineManager)
    database = providers.Singleton(Database)

    # Repositories (stateless - use session_factory per-request)
    ticketing_routine_repo = providers.Singleton(
        TicketingRoutineRepoImpl, session_factory=database.provided.session
    )


container = Container()
