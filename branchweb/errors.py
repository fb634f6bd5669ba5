"""Exception hierarchy for the Branch client.

Every error an operation can report is a ``BranchError``. Operations either
raise it or, when a callback is supplied, hand it to the callback's error slot.
"""


class BranchError(Exception):
    """Base class for all client errors."""


class AlreadyInitialized(BranchError):
    """Raised when ``initialize`` is called on a manager that already started."""

    def __init__(self, message: str = "Branch SDK has already been initialized"):
        super().__init__(message)


class NotInitialized(BranchError):
    """Raised when a feature operation runs before ``initialize``."""

    def __init__(self, message: str = "Branch SDK not initialized, call initialize() first"):
        super().__init__(message)


class TransportError(BranchError):
    """The remote call failed at the HTTP layer.

    Attributes:
        status_code: HTTP status of the response, or None when no response arrived.
        cause: The underlying httpx exception.
    """

    def __init__(self, message: str, status_code: int | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


class MalformedResponse(BranchError):
    """A response is missing a field the operation depends on."""

    def __init__(self, resource: str, field: str):
        super().__init__(f"Response from '{resource}' is missing '{field}'")
        self.resource = resource
        self.field = field


class InvalidRequest(BranchError, ValueError):
    """The caller supplied arguments the operation cannot send."""
