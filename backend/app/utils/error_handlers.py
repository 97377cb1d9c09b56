"""
Centralized error handling and user-friendly error messages.
"""
import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None, headers: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Validation error."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class UnauthorizedError(AppError):
    """Unauthorized access error."""
    def __init__(self, message: str = "Unauthorized access", details: dict | None = None):
        super().__init__(message, status_code=401, details=details, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    """Forbidden access error."""
    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details)


class ConflictError(AppError):
    """State conflict, e.g. a transition from a terminal status."""
    def __init__(self, message: str = "Conflicting state", details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class FileUploadError(AppError):
    """File upload error."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid email or password",
    "authentication_required": "Authentication required",
    "invalid_token": "Invalid or expired token",
    "session_expired": "Your session has expired. Please login again.",
    "wrong_current_password": "Current password is incorrect",
    "weak_password": "Password must be at least 6 characters long.",

    # Users
    "user_not_found": "User not found",
    "user_exists": "User with this email or username already exists",
    "own_role_change": "Cannot change your own role",
    "own_account_delete": "Cannot delete your own account",

    # Registry
    "client_not_found": "Client not found",
    "candidate_not_found": "Candidate not found",
    "candidate_exists": "A candidate with this email already exists",

    # Applications
    "application_not_found": "Application not found",
    "application_already_approved": "Application has already been approved and cannot be rejected",

    # File uploads
    "no_file": "No file uploaded",
    "file_too_large": "File is too large. Maximum size is 5MB.",
    "invalid_file_type": "Invalid file type for this upload.",
    "file_processing_failed": "Failed to store the uploaded file. Please try again.",
    "template_settings_not_found": "No template settings found",

    # Export
    "unknown_template": "Unknown resume template",
    "export_failed": "Failed to generate the resume document",

    # General
    "unauthorized": "Please login to access this feature.",
    "forbidden": "You don't have permission to access this resource.",
    "admin_required": "Admin access required",
    "not_found": "The requested resource was not found.",
    "server_error": "An unexpected error occurred",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_file_upload_error(error: Exception, filename: str = "") -> HTTPException:
    """Handle file upload errors with user-friendly messages."""
    logger.error("File upload error for %s: %s", filename, error)

    if isinstance(error, HTTPException):
        return error

    error_str = str(error).lower()

    if "size" in error_str or "too large" in error_str:
        return HTTPException(
            status_code=413,
            detail=get_error_message("file_too_large")
        )

    if "type" in error_str or "format" in error_str:
        return HTTPException(
            status_code=400,
            detail=get_error_message("invalid_file_type")
        )

    return HTTPException(
        status_code=500,
        detail=get_error_message("file_processing_failed")
    )


def handle_database_error(error: Exception, operation: str = "") -> HTTPException:
    """Handle database errors with user-friendly messages."""
    logger.error("Database error during %s: %s", operation, error)

    error_str = str(error).lower()

    if "duplicate" in error_str or "unique" in error_str:
        return HTTPException(
            status_code=409,
            detail="This record already exists. Please check your input."
        )

    if "foreign key" in error_str:
        return HTTPException(
            status_code=400,
            detail="Invalid reference. The related record may have been deleted."
        )

    if "connection" in error_str or "operational" in error_str:
        return HTTPException(
            status_code=503,
            detail=get_error_message("database_error")
        )

    return HTTPException(
        status_code=500,
        detail=get_error_message("server_error")
    )


def create_error_response(
    status_code: int,
    message: str,
    details: dict | list | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
        "status_code": status_code,
    }

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )


def format_validation_errors(errors: list[dict]) -> str:
    """Flatten pydantic error dicts into one readable line.

    ``[{"loc": ("body", "email"), "msg": "Value error, Invalid email format"}]``
    becomes ``"Validation error: email: Invalid email format"``.
    """
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = str(err.get("msg", "invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    if not parts:
        return get_error_message("validation_error")
    return "Validation error: " + "; ".join(parts)
