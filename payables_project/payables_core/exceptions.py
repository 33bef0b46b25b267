class PayablesError(Exception):
    """Base class for failures surfaced by payables operations."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ConflictError(PayablesError):
    """Raised when an operation collides with existing state
    (order already converted, duplicate bill number)."""
    pass


class StaleDocumentError(ConflictError):
    """Raised when a bill was changed by someone else since it was read."""
    pass


class NotFoundError(PayablesError):
    """Raised when a record is absent or outside the caller's company."""
    pass


class PersistenceError(PayablesError):
    """Raised when a statement fails inside an operation's transaction."""
    pass
