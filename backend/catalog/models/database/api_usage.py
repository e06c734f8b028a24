"""
API usage log database model.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from catalog.core.database import Base, utc_now


class ApiUsageRecord(Base):
    """One row per inbound API call. Append-only."""

    __tablename__ = "api_usage"

    id = Column(Integer, primary_key=True, index=True)
    endpoint = Column(String(500), nullable=False, index=True)
    method = Column(String(10), nullable=True)
    status_code = Column(Integer, nullable=False)
    error_type = Column(String(100), nullable=True)
    quota_used = Column(Integer, nullable=True)
    usage_metadata = Column("metadata", JSON, nullable=True)
    is_successful = Column(Boolean, nullable=False)

    timestamp = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True)
