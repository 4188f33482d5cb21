"""Bearer token signing and verification."""
from datetime import datetime, timedelta

from jose import JWTError, jwt

from bloodbridge.config import get_settings

settings = get_settings()


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be trusted."""


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> str:
    """Return the user id carried by a valid access token."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise InvalidTokenError("Invalid or expired token") from exc

    if payload.get("type") != "access":
        raise InvalidTokenError("Invalid token type")

    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise InvalidTokenError("Invalid token")
    return user_id
