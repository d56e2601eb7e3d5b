from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from app.core.database import Base

class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    plan_id = Column(String(255), nullable=True)
    type = Column(String(50), nullable=False, default="team")
    created_at = Column(DateTime, server_default=func.now())

    members = relationship("User", back_populates="organization")
    teams = relationship("Team", back_populates="organization")
    invitations = relationship("OrganizationInvitation", back_populates="organization", cascade="all, delete-orphan")
