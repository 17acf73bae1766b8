"""Error taxonomy shared by the services and the HTTP layer.

Every error carries a human readable ``message`` (returned verbatim to the
client as ``{"error": message}``), a stable machine ``code`` and the HTTP
status the gateway should answer with.
"""


class AppError(Exception):
    status_code = 400
    default_code = "Error"

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(AppError):
    status_code = 400
    default_code = "ValidationError"


class AuthError(AppError):
    status_code = 401
    default_code = "Unauthorized"


class NotFound(AppError):
    status_code = 404
    default_code = "NotFound"


class InternalError(AppError):
    status_code = 500
    default_code = "InternalError"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


def missing_fields() -> ValidationError:
    return ValidationError("Missing required fields", code="MissingFields")


def invalid_category() -> ValidationError:
    return ValidationError("Invalid category", code="InvalidCategory")


def insufficient_funds() -> ValidationError:
    return ValidationError("Insufficient funds", code="InsufficientFunds")


def invalid_amount() -> ValidationError:
    return ValidationError("Amount must be greater than zero", code="InvalidAmount")


def unauthorized() -> AuthError:
    return AuthError("Unauthorized", code="Unauthorized")


def invalid_credentials() -> AuthError:
    return AuthError("Invalid email or password", code="InvalidCredentials")
