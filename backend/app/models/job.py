"""
Job listing models
"""
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.timeutils import utcnow
from app.models.user import new_id


class JobStatus(str, enum.Enum):
    DRAFT = "draft"
    OPEN = "open"
    PAUSED = "paused"
    CLOSED = "closed"


class Job(Base):
    """Job posting owned by an employer"""

    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=new_id)
    employer_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    slug = Column(String(255), unique=True, nullable=False)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    location = Column(String(255))
    remote = Column(Boolean, nullable=False, default=False)
    employment_type = Column(String(50))  # free text, e.g. "Full-time", "Internship"

    salary_min = Column(Integer)
    salary_max = Column(Integer)
    currency = Column(String(8), nullable=False, default="INR")

    status = Column(String(16), nullable=False, default=JobStatus.OPEN.value, index=True)
    published_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    employer = relationship("User")
    applications = relationship("Application", back_populates="job", passive_deletes=True)


class SavedJob(Base):
    """Candidate bookmark of a job"""

    __tablename__ = "saved_jobs"
    __table_args__ = (UniqueConstraint("candidate_id", "job_id", name="uq_saved_job"),)

    id = Column(String(36), primary_key=True, default=new_id)
    candidate_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
