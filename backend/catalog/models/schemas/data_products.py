"""
Data product schemas.
"""
from typing import Optional, List, Dict, Any, Union
from datetime import datetime
from pydantic import ConfigDict, Field
from catalog.models.schemas.base import CamelModel


class DataProductCreate(CamelModel):
    """Schema for registering a data product."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    owner: Optional[str] = Field(None, max_length=255, description="Steward username; defaults to the caller")
    domain: Optional[str] = Field(None, max_length=100)
    data_schema: Union[List[Dict[str, Any]], Dict[str, Any]] = Field(default_factory=dict, alias="schema")
    tags: List[str] = Field(default_factory=list)
    sla: Optional[str] = Field(None, max_length=255)
    update_frequency: Optional[str] = Field(None, max_length=100)


class DataProductResponse(CamelModel):
    """Schema for data product response."""
    id: int
    name: str
    description: Optional[str] = None
    owner: str
    domain: Optional[str] = None
    data_schema: Union[List[Dict[str, Any]], Dict[str, Any], None] = Field(None, alias="schema")
    tags: List[str] = Field(default_factory=list)
    sla: Optional[str] = None
    update_frequency: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, product):
        """Create from ORM model."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            owner=product.owner,
            domain=product.domain,
            data_schema=product.schema,
            tags=product.tags or [],
            sla=product.sla,
            update_frequency=product.update_frequency,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
