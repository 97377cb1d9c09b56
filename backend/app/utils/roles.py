from fastapi import Depends

from .dependencies import get_current_user
from .error_handlers import ForbiddenError, get_error_message

STAFF_ROLES = ("user", "admin")


def _role_required(message_key: str, *allowed_roles: str):
    def check_role(user=Depends(get_current_user)):
        if user.get("role") not in allowed_roles:
            raise ForbiddenError(get_error_message(message_key))
        return user
    return check_role


staff_only = _role_required("forbidden", *STAFF_ROLES)
admin_only = _role_required("admin_required", "admin")
