"""
Validation utilities for input validation and error handling.
"""
import re
from typing import Any
from fastapi import HTTPException

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

USER_ROLES = ("user", "admin")
CLIENT_STATUSES = ("active", "inactive", "lead", "pending")
CANDIDATE_STATUSES = ("active", "interviewing", "placed", "inactive")
APPLICATION_STATUSES = ("pending", "approved", "rejected")


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise HTTPException(status_code=400, detail="Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise HTTPException(status_code=400, detail="Email too long (max 255 characters)")

    if not EMAIL_PATTERN.match(email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise HTTPException(status_code=400, detail="Password is required")

    if len(password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    if len(password) > 128:
        raise HTTPException(status_code=400, detail="Password too long (max 128 characters)")


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
    pattern: str | None = None,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")

    if len(value) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must be at least {min_length} characters"
        )

    if len(value) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must not exceed {max_length} characters"
        )

    if pattern and not re.match(pattern, value):
        raise HTTPException(status_code=400, detail=f"{field_name} format is invalid")

    return value


def validate_choice(value: str | None, field_name: str, choices: tuple[str, ...], default: str | None = None) -> str | None:
    """Normalize a status/role style value and check it against the allowed set."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default

    value = str(value).strip().lower()
    if value not in choices:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {field_name}. Must be one of: {', '.join(choices)}"
        )
    return value


def validate_role(role: str | None) -> str:
    """Validate user role."""
    return validate_choice(role, "role", USER_ROLES, default="user")


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent directory traversal and other attacks."""
    if not filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    # Remove any path separators
    filename = filename.replace("/", "_").replace("\\", "_")

    # Remove any null bytes
    filename = filename.replace("\x00", "")

    # Remove directory traversal sequences
    filename = filename.replace("..", "_")

    # Remove leading dots to prevent hidden files
    filename = filename.lstrip(".")

    # Ensure it's not too long
    if len(filename) > 255:
        raise HTTPException(status_code=400, detail="Filename too long")

    # Ensure it has some content
    if not filename or filename == "_":
        raise HTTPException(status_code=400, detail="Invalid filename")

    return filename
