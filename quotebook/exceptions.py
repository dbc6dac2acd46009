"""Domain exceptions mapped to HTTP responses in blueprints.errors."""


class QuotebookError(Exception):
    """Base class for errors the API reports with a readable message."""
    status_code = 500
    error_type = 'server'

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.message = message
        self.fields = fields or {}


class ValidationError(QuotebookError, ValueError):
    """Raised when input is invalid; nothing has been written."""
    status_code = 400
    error_type = 'validation'


class StateError(QuotebookError):
    """Raised when an action is not allowed in the record's current state."""
    status_code = 409
    error_type = 'state'


class DeliveryError(QuotebookError):
    """Raised when the mail server refuses or fails to send a document."""
    status_code = 502
    error_type = 'delivery'
