import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationFailure
from app.core.security import get_password_hash, verify_password
from app.models import user as models_user
from app.models.user import UserRole
from app.schemas import user as schemas_user
from app.services import organization_service

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "The email has already been taken."


def get_user_by_email(db: Session, email: str):
    return db.query(models_user.User).filter(models_user.User.email == email).first()


def build_user(name: str, email: str, password: str, organization_id: int, role: UserRole = UserRole.MEMBER):
    """Build an unsaved user with a hashed password."""
    return models_user.User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        organization_id=organization_id,
        role=role,
        is_active=True,
    )


def create_user(db: Session, user: schemas_user.UserCreate, organization_id: int):
    if get_user_by_email(db, user.email):
        raise ValidationFailure({"email": EMAIL_TAKEN})

    db_user = build_user(user.name, user.email, user.password, organization_id, user.role)
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailure({"email": EMAIL_TAKEN})
    db.refresh(db_user)
    logger.info("Created user %s (%s) in organization %s", db_user.id, db_user.role.value, organization_id)
    return db_user


def signup(db: Session, request: schemas_user.SignupRequest):
    """Create a new organization together with its owner."""
    if get_user_by_email(db, request.email):
        raise ValidationFailure({"email": EMAIL_TAKEN})

    organization = organization_service.create_organization(db, name=request.organization_name)
    owner = build_user(request.name, request.email, request.password, organization.id, UserRole.OWNER)
    db.add(owner)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailure({"email": EMAIL_TAKEN})
    db.refresh(owner)
    logger.info("Organization %s created by %s", organization.id, owner.email)
    return owner


def authenticate(db: Session, email: str, password: str):
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
