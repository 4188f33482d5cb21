"""Shared API dependencies."""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bloodbridge.database import get_db
from bloodbridge.models.user import User
from bloodbridge.security import InvalidTokenError, decode_access_token
from bloodbridge.services.geocoding import Geocoder
from bloodbridge.services.policy import authorize

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = ["ensure_authorized", "get_current_user", "get_db", "get_geocoder"]


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_geocoder(request: Request) -> Geocoder:
    """Geocoder client built at startup."""
    return request.app.state.geocoder


def ensure_authorized(actor: User, action: str, resource, detail: str = "Not authorized") -> None:
    """Raise 401 unless the policy allows ``action``."""
    if not authorize(actor, action, resource):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
