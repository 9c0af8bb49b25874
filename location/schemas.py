from __future__ import annotations
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field

class LocationSchema(BaseModel):
    id: str
    org_id: int
    name: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    path: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class LocationTree(LocationSchema):
    children: List[LocationTree] = Field(default_factory=list)

# PUBLIC payload, what clients send
class LocationCreatePayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


# INTERNAL DTO for the service
class LocationCreate(BaseModel):
    org_id: int
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[str] = None

# parent_id: leave unset to stay put, send null to move to the root
class LocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    model_config = ConfigDict(extra="forbid")

class LocationMovePayload(BaseModel):
    new_parent_id: Optional[str] = None
    model_config = ConfigDict(extra="forbid")
