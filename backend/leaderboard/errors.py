"""Domain errors raised by the leaderboard service and store.

Each error carries the HTTP status the API layer answers with, so views
never need to know which failure happened to pick a response code.
"""


class LeaderboardError(Exception):
    """Base class for all leaderboard domain errors."""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ValidationError(LeaderboardError):
    """Bad or missing input, or a record the store refused."""

    status_code = 400


class NotFoundError(LeaderboardError):
    """The referenced player does not exist."""

    status_code = 404


class StorageError(LeaderboardError):
    """The store is unreachable or an operation on it failed."""

    status_code = 500
