"""
Job application models
"""
import enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.timeutils import utcnow
from app.models.user import new_id


class ApplicationStatus(str, enum.Enum):
    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


ACTIVE_STATUSES = (
    ApplicationStatus.APPLIED.value,
    ApplicationStatus.SCREENING.value,
    ApplicationStatus.INTERVIEW.value,
    ApplicationStatus.OFFER.value,
)


class ApplicationEventType(str, enum.Enum):
    APPLIED = "applied"
    WITHDRAWN = "withdrawn"
    STATUS_CHANGED = "status_changed"
    INTERVIEW_SCHEDULED = "interview_scheduled"


class Application(Base):
    """A candidate's application to a job"""

    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=new_id)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(String(32), nullable=False, default=ApplicationStatus.APPLIED.value, index=True)
    step = Column(String(255))  # free-text stage label shown to the candidate
    cover_letter = Column(Text)
    resume_url = Column(String(500))

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    next_interview_at = Column(DateTime(timezone=True))

    # Relationships
    job = relationship("Job", back_populates="applications")
    events = relationship("ApplicationEvent", back_populates="application", passive_deletes=True)


class ApplicationEvent(Base):
    """Append-only timeline entry for an application"""

    __tablename__ = "application_events"

    id = Column(String(36), primary_key=True, default=new_id)
    application_id = Column(
        String(36), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    actor_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))

    type = Column(String(32), nullable=False)
    from_status = Column(String(32))
    to_status = Column(String(32))
    message = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    application = relationship("Application", back_populates="events")
