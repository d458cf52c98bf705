"""
Mapping from storage failures to HTTP responses.

All status decisions for storage errors live in ``ErrorPolicy`` so they
can be reviewed in one place. Write failures historically answered 401;
the default here is 500, and the legacy code can be restored through
``USERS_API_WRITE_ERROR_STATUS``.
"""

from typing import Dict, Type

from users_api.core.store import StorageError, StorageReadError, StorageWriteError

CREATE_FAILED_MESSAGE = "Failed to create user."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


def user_not_found_message(raw_id: str) -> str:
    return f'Requested user "{raw_id}" does not exist.'


class ErrorPolicy:
    """Error kind to HTTP status table."""

    def __init__(self, write_error_status: int = 500):
        self.statuses: Dict[Type[StorageError], int] = {
            StorageReadError: 500,
            StorageWriteError: write_error_status,
        }

    def status_for(self, error: StorageError) -> int:
        for kind, status_code in self.statuses.items():
            if isinstance(error, kind):
                return status_code
        return 500
