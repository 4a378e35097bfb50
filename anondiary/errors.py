"""Error hierarchy for anon-diary."""

from typing import Optional


class DiaryError(Exception):
    """Base for all anon-diary errors."""

    pass


class ValidationError(DiaryError):
    """Raised when a submission carries nothing to act on."""

    pass


class NotFoundError(DiaryError):
    """Raised when a record looked up by id does not exist."""

    pass


class StorageError(DiaryError):
    """Raised by the storage accessor on any database failure."""

    pass


class GenerationError(DiaryError):
    """Raised when the text-generation endpoint cannot produce a completion.

    Carries the HTTP status and response body when the endpoint answered
    with a non-success status; both are None for transport failures.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
