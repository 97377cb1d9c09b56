import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import SESSION_COOKIE_NAME
from .error_handlers import UnauthorizedError, get_error_message
from .jwt import TokenExpired, TokenInvalid, decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(message_key: str) -> UnauthorizedError:
    return UnauthorizedError(get_error_message(message_key))


def get_session_store(request: Request):
    return request.app.state.session_store


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """Resolve the caller's identity from the bearer token or the session cookie.

    Returns the identity dict ``{"sub", "id", "email", "name", "role"}`` and also
    stores it on ``request.state.user``.
    """
    token = credentials.credentials if credentials else None
    if not token:
        store = get_session_store(request)
        token = store.get_token(request.cookies.get(SESSION_COOKIE_NAME))

    if not token:
        raise _unauthorized("authentication_required")

    try:
        payload = decode_access_token(token)
    except TokenExpired:
        raise _unauthorized("session_expired")
    except TokenInvalid as e:
        logger.warning("Token verification failed: %s", e)
        raise _unauthorized("invalid_token")

    try:
        user_id = int(payload.get("id") or payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("invalid_token")

    identity = {
        "sub": str(user_id),
        "id": user_id,
        "email": payload.get("email"),
        "name": payload.get("name"),
        "role": payload.get("role") or "user",
    }
    request.state.user = identity
    return identity
