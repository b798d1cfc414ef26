class ApiError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    message = "Server error"

    def __init__(self, message: str | None = None, details=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class ValidationError(ApiError):
    status = 400
    code = "VALIDATION_ERROR"
    message = "Invalid input."


class Unauthenticated(ApiError):
    status = 401
    code = "UNAUTHORIZED"
    message = "Missing or invalid Authorization header"


class TokenExpired(Unauthenticated):
    code = "TOKEN_EXPIRED"
    message = "Token expired"


class InvalidToken(Unauthenticated):
    code = "INVALID_TOKEN"
    message = "Invalid or expired token"


class NotFound(ApiError):
    status = 404
    code = "NOT_FOUND"
    message = "Not found"


class Conflict(ApiError):
    status = 409
    code = "CONFLICT"
    message = "Conflict"


class PayloadTooLarge(ApiError):
    status = 413
    code = "PAYLOAD_TOO_LARGE"
    message = "Payload too large"


class UpstreamError(ApiError):
    status = 500
    code = "UPSTREAM_ERROR"
    message = "Upstream service error"
