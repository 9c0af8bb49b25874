from pydantic import BaseModel, Field

# internal DTO for service
class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
