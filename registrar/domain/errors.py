class RegistrarError(Exception):
    """Базовая доменная ошибка; code уходит клиенту в extensions.code."""
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Registrar error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class AuthenticationRequired(RegistrarError):
    code = "UNAUTHENTICATED"
    default_message = "Authentication required"


class InvalidCredentials(RegistrarError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class NotFound(RegistrarError):
    code = "NOT_FOUND"
    default_message = "Not found"


class ValidationFailure(RegistrarError):
    code = "BAD_USER_INPUT"
    default_message = "Invalid input"


class TransientStoreFailure(RegistrarError):
    code = "STORE_UNAVAILABLE"
    default_message = "Store unavailable"
