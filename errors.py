"""
Error kinds raised by the catalog, scheduler and booking services.

Each kind carries the HTTP status it is rendered with, so the web layer
needs a single handler for all of them.
"""


class CinemaError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(CinemaError):
    status_code = 400


class NotFoundError(CinemaError):
    status_code = 404


class ConflictError(CinemaError):
    status_code = 409


class PersistenceError(CinemaError):
    """A database operation failed; the original exception is chained."""

    status_code = 500
