"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_ticketing_routine_repo import ITicketingRoutineRepo

__all__ = [
    'ITicketingRoutineRepo',
]
