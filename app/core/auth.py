"""
Bearer token resolution: the `sub` claim carries the user's email.
"""
from typing import Optional

from fastapi import HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import decode_access_token
from app.models.user import User
from app.services.user_service import get_user_by_email

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def token_subject(token: str) -> Optional[str]:
    """Email stored in the token, or None when the token is unusable."""
    try:
        payload = decode_access_token(token)
    except JWTError:
        return None
    return payload.get("sub")


def get_user_from_token(db: Session, token: str) -> User:
    email = token_subject(token)
    if email is None:
        raise _unauthorized()
    user = get_user_by_email(db, email=email)
    if user is None:
        raise _unauthorized()
    return user
