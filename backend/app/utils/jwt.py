from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, SECRET_KEY

ALGORITHM = "HS256"


class TokenExpired(Exception):
    pass


class TokenInvalid(Exception):
    pass


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_user_token(user) -> str:
    """Token carrying the identity the gate attaches to each request."""
    return create_access_token(
        {
            "sub": str(user.id),
            "id": user.id,
            "email": user.email,
            "name": user.display_name,
            "role": user.role or "user",
        }
    )


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpired(str(e)) from e
    except JWTError as e:
        raise TokenInvalid(str(e)) from e
