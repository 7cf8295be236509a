# estate_filters/errors.py
"""Errors raised by the filter engine.

The HTTP layer maps each class onto a status code; nothing here is retried.
"""


class FilterEngineError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFound(FilterEngineError):
    """A group, value or listing id does not exist."""
    status_code = 404


class Conflict(FilterEngineError):
    """A uniqueness rule would be broken, e.g. a duplicate group slug."""
    status_code = 409


class ValidationFailure(FilterEngineError):
    """Malformed caller input, rejected before any query executes."""
    status_code = 422


class TransactionFailure(FilterEngineError):
    """A multi-row mutation failed and was rolled back as a whole."""
    status_code = 500
