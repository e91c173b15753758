"""Domain failures raised by services and mapped to HTTP responses in main."""

from fastapi import status


class DomainError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class AuthenticationError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class InvalidTokenError(AuthenticationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid token"


class AuthorizationError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class OutOfStockError(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Out of stock"


class InsufficientPointsError(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Insufficient points"


class RewardUnavailableError(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Reward not found"
