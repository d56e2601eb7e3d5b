from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from datetime import date
import enum

from app.core.database import Base


class CheckInStatus(str, enum.Enum):
    """Check-in lifecycle status"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"  # Only persisted by the explicit overdue reconciliation

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


# Statuses reachable from each status through an assigned-user action.
ALLOWED_TRANSITIONS = {
    CheckInStatus.PENDING: {CheckInStatus.IN_PROGRESS, CheckInStatus.COMPLETED},
    CheckInStatus.OVERDUE: {CheckInStatus.IN_PROGRESS, CheckInStatus.COMPLETED},
    CheckInStatus.IN_PROGRESS: {CheckInStatus.COMPLETED},
    CheckInStatus.COMPLETED: set(),
}


class CheckIn(Base):
    __tablename__ = "check_ins"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    status = Column(
        Enum(CheckInStatus, values_callable=lambda statuses: [s.value for s in statuses], name="check_in_status"),
        default=CheckInStatus.PENDING,
        nullable=False,
        index=True,
    )
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    team = relationship("Team", back_populates="check_ins")
    assigned_user = relationship("User", foreign_keys=[assigned_user_id])
    created_by = relationship("User", foreign_keys=[created_by_user_id])

    @property
    def organization_id(self):
        return self.team.organization_id if self.team else None

    @property
    def is_overdue(self) -> bool:
        """Derived flag, independent of the stored status."""
        return self.scheduled_date < date.today() and self.status != CheckInStatus.COMPLETED

    @property
    def days_until_due(self) -> int:
        return (self.scheduled_date - date.today()).days

    def can_transition_to(self, status: CheckInStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]
