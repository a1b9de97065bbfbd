"""
Unified base exception classes for all services.

Each service extends one of these with its own specific error
(e.g. PhoneTakenError) so routers can handle them uniformly.
"""


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidInputError(ServiceError):
    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, 400)


class ConflictError(ServiceError):
    def __init__(self, message: str = "Conflict"):
        super().__init__(message, 409)


class NotFoundError(ServiceError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, 404)


class UnauthorizedError(ServiceError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, 401)


class InsufficientBalanceError(ServiceError):
    def __init__(self, message: str = "Insufficient balance"):
        super().__init__(message, 400)


class StoreError(Exception):
    """Record store fault: unknown collection or unreadable collection file."""
