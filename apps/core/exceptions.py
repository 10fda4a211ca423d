# apps/core/exceptions.py

"""
Error taxonomy shared by the store, the reorder coordinator and the views

Every error carries the HTTP status it maps to and a message that is
safe to hand to the client. Internal detail (the original database
error, stack traces) stays in the server log.
"""


class BoardError(Exception):
    """Base class for errors that cross the API boundary"""

    status_code = 500
    default_message = 'An unexpected error occurred'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(BoardError):
    """Missing or malformed required field"""

    status_code = 400
    default_message = 'Invalid input'


class AuthFailure(BoardError):
    """Missing or invalid credential"""

    status_code = 401
    default_message = 'Authentication required'


class PermissionDenied(AuthFailure):
    """Valid credential without access to the resource"""

    status_code = 403
    default_message = 'Forbidden'


class NotFound(BoardError):
    """Referenced entity does not exist"""

    status_code = 404
    default_message = 'Not found'


class Conflict(BoardError):
    """Duplicate value for a unique field"""

    status_code = 409
    default_message = 'Conflict'


class StoreFailure(BoardError):
    """Transaction or connection error in the persistence layer"""

    status_code = 500
    default_message = 'A storage error occurred'


class ReorderFailed(StoreFailure):
    """
    A reorder batch could not be applied

    The whole batch was rolled back; `cause` keeps the error that
    aborted it for logging.
    """

    default_message = 'Failed to reorder'

    def __init__(self, message=None, cause=None):
        super().__init__(message)
        self.cause = cause
