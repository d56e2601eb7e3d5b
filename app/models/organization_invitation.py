from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base


class InvitationStatus(str, enum.Enum):
    """Invitation lifecycle status"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class OrganizationInvitation(Base):
    __tablename__ = "organization_invitations"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(255), unique=True, nullable=False, index=True)
    status = Column(
        Enum(InvitationStatus, values_callable=lambda statuses: [s.value for s in statuses], name="invitation_status"),
        default=InvitationStatus.PENDING,
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    organization = relationship("Organization", back_populates="invitations")
    invited_by = relationship("User")

    def is_expired(self, now: datetime = None) -> bool:
        return self.expires_at <= (now or datetime.utcnow())

    def is_valid(self, now: datetime = None) -> bool:
        """Pending and not yet past its expiry."""
        return self.status == InvitationStatus.PENDING and not self.is_expired(now)
