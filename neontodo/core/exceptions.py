"""Domain exceptions raised by the service layer.

All of them derive from ``ValueError`` so callers that only care about
"the operation was rejected" can keep catching ``ValueError``.
Storage failures are not wrapped: they surface as ``sqlalchemy.exc.SQLAlchemyError``
after the surrounding transaction has been rolled back.
"""


class NeonTodoError(ValueError):
    """Base class for rejected operations."""

    code = "ERROR"


class ValidationError(NeonTodoError):
    """Empty name/title after trimming, out-of-range priority, bad date, etc."""

    code = "VALIDATION_ERROR"


class NotFoundError(NeonTodoError):
    """Referenced project/task/tag does not exist."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with id={resource_id} not found")


class ProtectedResourceError(NeonTodoError):
    """Attempt to delete the inbox project."""

    code = "PROTECTED"


class BackupFormatError(NeonTodoError):
    """Backup document is not valid JSON, not an object, or has an unsupported version."""

    code = "BACKUP_FORMAT"


class OperationCancelled(Exception):
    """The user declined a file picker or a destructive confirmation.

    Not an error: services log it and return ``None``.
    """
