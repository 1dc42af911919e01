"""Custom exceptions for the OrderHub application."""

class OrderHubError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(OrderHubError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class DraftValidationError(BusinessLogicError):
    """Raised when an order draft is not ready to be submitted."""
    def __init__(self, message="The order draft is incomplete", payload=None):
        super().__init__(message, 400, payload)

class NotFoundError(OrderHubError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class UnauthorizedError(OrderHubError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Unauthorized access"):
        super().__init__(message, 403)

class AuthenticationError(OrderHubError):
    """Raised when an identity is required but there is no active session."""
    def __init__(self, message="User not authenticated"):
        super().__init__(message, 401)

class ResolutionError(OrderHubError):
    """
    Raised when a referenced profile or record cannot be resolved for the
    authenticated identity, or a backend row fails boundary validation.
    Always raised before any write happens.
    """
    def __init__(self, message="Could not resolve the requested record", payload=None):
        super().__init__(message, 404, payload)

class PersistenceError(OrderHubError):
    """
    Raised when a backend write fails.

    `stage` names the write that failed ('retailer', 'order', 'order_items')
    so diagnostics can tell the failure kinds apart. The end user only ever
    sees the generic message.
    """
    USER_MESSAGE = "Failed to create order, please try again."

    def __init__(self, stage, cause=None):
        super().__init__(self.USER_MESSAGE, 500)
        self.stage = stage
        self.cause = cause
