"""
Data product database model.
"""
from sqlalchemy import Column, Integer, String, JSON, DateTime, Text
from sqlalchemy.sql import func
from catalog.core.database import Base, utc_now


class DataProduct(Base):
    """Cataloged, owned dataset."""

    __tablename__ = "data_products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    owner = Column(String(255), nullable=False, index=True)  # Steward username
    domain = Column(String(100), nullable=True, index=True)

    schema = Column(JSON, nullable=False, default=dict)  # Column list or JSON-schema object
    tags = Column(JSON, nullable=False, default=list)  # List of strings

    sla = Column(String(255), nullable=True)
    update_frequency = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
