# This project was developed with assistance from AI tools.
"""Service-layer exceptions.

Each carries the HTTP status and machine-readable code used by the error
envelope in ``main.py``. Services raise these; routes let them propagate.
"""


class LeadLensError(Exception):
    """Base for all errors surfaced to API clients."""

    status_code: int = 500
    code: str = "SERVER_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LeadLensError):
    status_code = 400
    code = "VALIDATION"
    default_message = "Invalid request"


class UnknownFieldError(ValidationError):
    """Raised when a write references a field outside the field map."""

    code = "UNKNOWN_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Unknown field: {field}")


class FieldNotEditableError(ValidationError):
    """Raised when a role writes a mapped field outside its allow-list."""

    code = "FIELD_NOT_EDITABLE"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Field not editable: {field}")


class TooManyRecordsError(ValidationError):
    code = "TOO_MANY_RECORDS"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Max {limit} records per request")


class UnauthorizedError(LeadLensError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Missing or invalid token"


class InvalidTokenError(UnauthorizedError):
    """Expired, malformed, or badly signed session token."""

    default_message = "Invalid token"


class InvalidCredentialsError(LeadLensError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class ForbiddenError(LeadLensError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Insufficient permissions"


class AccountDisabledError(ForbiddenError):
    code = "DISABLED"
    default_message = "Account disabled. Contact admin."


class NoScopeError(ForbiddenError):
    code = "NO_SCOPE"
    default_message = "User has no Salesforce scope configured"


class NotFoundError(LeadLensError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class AlreadyExistsError(LeadLensError):
    status_code = 409
    code = "EXISTS"
    default_message = "A user with this email already exists"


class CRMError(LeadLensError):
    """Salesforce returned an error or could not be reached."""

    status_code = 500
    code = "SERVER_ERROR"
    default_message = "Salesforce request failed"
