"""Error taxonomy for the admin and public API.

Every error carries the HTTP status it maps to; the Flask app renders them as
``{"success": false, "error": message}``.
"""


class AppError(Exception):
    status_code = 500
    default_message = "An internal error occurred"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"success": False, "error": self.message, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidReferenceError(AppError):
    status_code = 400
    default_message = "Referenced record does not exist"


class InvalidCredentialsError(AppError):
    # 400, not 401: the admin console treats 401 as an expired session
    status_code = 400
    default_message = "Current password is incorrect"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class DuplicateNameError(AppError):
    status_code = 409
    default_message = "Name already exists"


class ReorderConflictError(AppError):
    status_code = 409
    default_message = "Order list does not match the current items"


class StoreUnavailableError(AppError):
    status_code = 503
    default_message = "Database unavailable"
