class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(DomainError):
    """Malformed or missing input, or an entity that breaks its invariants."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class PersistenceError(CustomBaseError):
    """Storage failure surfaced from the unit of work or the routine executor."""

    def __init__(
        self, message: str, status_code: int = 500, *, cause: BaseException | None = None
    ) -> None:
        super().__init__(message, status_code)
        self.cause = cause


class ConstraintError(PersistenceError):
    """The storage engine rejected a write because it would break an invariant."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message, 400, cause=cause)


class ConnectivityError(PersistenceError):
    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message, 503, cause=cause)


class QueryShapeError(PersistenceError):
    """A routine returned an unexpected number of rows or unexpected columns."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message, 500, cause=cause)
