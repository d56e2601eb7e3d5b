from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.core import security
from app.core.dependencies import get_db, get_current_active_user
from app.schemas import user as schemas_user, token as schemas_token
from app.services import user_service
from app.models import user as models_user

router = APIRouter()


def issue_token(user: models_user.User) -> schemas_token.Token:
    access_token = security.create_access_token(data={"sub": user.email})
    return schemas_token.Token(access_token=access_token, token_type="bearer", organization_id=user.organization_id)


@router.post("/signup", response_model=schemas_user.User, status_code=status.HTTP_201_CREATED)
def signup(request: schemas_user.SignupRequest, db: Session = Depends(get_db)):
    """Register a new organization and its owner."""
    return user_service.signup(db, request)


@router.post("/login", response_model=schemas_token.Token)
def login_for_access_token(
    db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()
):
    user = user_service.authenticate(db, email=form_data.username, password=form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return issue_token(user)


@router.get("/me", response_model=schemas_user.User)
def read_current_user(current_user: models_user.User = Depends(get_current_active_user)):
    return current_user
