"""
Domain errors raised by SongQueue services

Routers never catch these; the handlers registered in songqueue.main turn
them into HTTP responses.
"""


class SongQueueError(Exception):
    """Base class for all domain errors"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SongQueueError):
    """Malformed or missing input"""

    status_code = 422


class InvalidFileType(ValidationError):
    """Uploaded file is not an allowed media type"""


class FileTooLarge(ValidationError):
    """Uploaded file exceeds the size ceiling"""

    status_code = 413


class NotFoundError(SongQueueError):
    """Referenced entity is absent or not owned by the caller"""

    status_code = 404


class InvalidOperationError(SongQueueError):
    """Well-formed request that violates a queue state precondition"""

    status_code = 409


class PaymentRequiredError(SongQueueError):
    """Skip-the-line requested without a valid proof of payment"""

    status_code = 402


class IOFailure(SongQueueError):
    """A collaborator (store, disk, identity provider) is unavailable"""

    status_code = 503
