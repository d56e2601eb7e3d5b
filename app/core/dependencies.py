from app.core.database import SessionLocal
from fastapi import HTTPException, Depends, status
from sqlalchemy.orm import Session

from app.core.auth import oauth2_scheme, get_user_from_token
from app.models import user as models_user


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_current_user(
    db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)
) -> models_user.User:
    return get_user_from_token(db, token)


async def get_current_active_user(
    current_user: models_user.User = Depends(get_current_user),
) -> models_user.User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user
