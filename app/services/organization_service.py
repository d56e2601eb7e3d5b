from typing import Optional

from sqlalchemy.orm import Session
from app.models import organization as models_organization


def get_organization(db: Session, organization_id: int):
    return db.query(models_organization.Organization).filter(models_organization.Organization.id == organization_id).first()


def create_organization(db: Session, name: str, type: str = "team", plan_id: Optional[str] = None):
    """Add an organization to the session; the caller commits."""
    db_organization = models_organization.Organization(name=name, type=type, plan_id=plan_id)
    db.add(db_organization)
    db.flush()
    return db_organization
