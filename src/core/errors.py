"""
Error types raised by the store, the team registry and the bracket service.
"""


class TournamentError(Exception):
    """Base class for errors that map to an HTTP status."""
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidInput(TournamentError):
    """Malformed, missing or out-of-range request field."""
    status_code = 400


class NotFound(TournamentError):
    """Referenced team or stage does not exist."""
    status_code = 404


class StorageUnavailable(TournamentError):
    """Persisted document could not be read or written."""
    status_code = 500
