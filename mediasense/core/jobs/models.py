import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, JSON, Uuid
from mediasense.core.database.base import Base
from mediasense.core.common.enums import MediaType
from .types import JobType, JobStatus

def utc_now():
    return datetime.now(timezone.utc)

class JobModel(Base):
    __tablename__ = "processing_jobs"

    # Generic Uuid maps to native UUID on Postgres and CHAR(32) on SQLite.
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    file_path = Column(String, nullable=False)
    file_hash = Column(String, nullable=True, index=True)
    media_type = Column(SQLEnum(MediaType), nullable=False, default=MediaType.UNKNOWN)

    job_type = Column(SQLEnum(JobType), nullable=False)
    status = Column(SQLEnum(JobStatus), default=JobStatus.PENDING, nullable=False, index=True)

    payload = Column(JSON, default=dict)     # Input options
    result_meta = Column(JSON, default=dict) # Serialized analysis output

    created_at = Column(DateTime(timezone=True), default=utc_now)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    error_message = Column(String, nullable=True)
