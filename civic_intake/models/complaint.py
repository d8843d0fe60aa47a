import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from civic_intake.core.database import Base
from civic_intake.models.user import User

# Placeholder until priority inference fills in real values
DEFAULT_AI_SCORE = 0.7


class ComplaintStatus(str, enum.Enum):
    """Value written on submission; later values belong to the officer workflow"""
    SUBMITTED = "submitted"


class ComplaintPriority(str, enum.Enum):
    """Priority written on submission"""
    MEDIUM = "medium"


def _utcnow():
    return datetime.now(timezone.utc)


class Complaint(Base):
    """
    Complaint submitted by a citizen.

    id is the internal key; complaint_id is the human-facing number shown to
    citizens and officers. Status and priority are only changed by officer
    workflows outside this service.
    """
    __tablename__ = "complaints"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Unique index turns complaint number collisions into IntegrityError
    complaint_id = Column(String(40), unique=True, index=True, nullable=False)
    citizen_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    # Category catalog is managed elsewhere, only the reference is stored
    category_id = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    # Plain strings: other services move complaints through states this one never writes
    status = Column(String(32), nullable=False, default=ComplaintStatus.SUBMITTED.value)
    priority = Column(String(32), nullable=False, default=ComplaintPriority.MEDIUM.value)
    location_lat = Column(Float, nullable=True)
    location_lng = Column(Float, nullable=True)
    location_address = Column(Text, nullable=True)
    ai_priority_score = Column(Float, nullable=False, default=DEFAULT_AI_SCORE)
    ai_confidence = Column(Float, nullable=False, default=DEFAULT_AI_SCORE)
    # Python-side default keeps sub-second ordering on every backend
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    citizen = relationship(User, backref="complaints")
    media = relationship("ComplaintMedia", back_populates="complaint", cascade="all, delete-orphan")


class ComplaintMedia(Base):
    """
    Attachment reference for a complaint.

    Files are uploaded elsewhere; only the URL and type metadata live here.
    Rows are written together with their complaint and never updated.
    """
    __tablename__ = "complaint_media"

    id = Column(Integer, primary_key=True, index=True)
    complaint_id = Column(String(36), ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False, index=True)
    file_url = Column(Text, nullable=False)
    file_type = Column(String(50), nullable=True)
    mime_type = Column(String(100), nullable=True)
    uploaded_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    complaint = relationship("Complaint", back_populates="media")
