from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from core.errors import ConflictError
from .models import Organization
from .schema import OrganizationCreate

def get_organization(db: Session, org_id: int) -> Optional[Organization]:
    return db.get(Organization, org_id)

def create_organization(db: Session, dto: OrganizationCreate) -> Organization:
    org = Organization(name=dto.name)
    db.add(org)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("organization name already exists")
    db.refresh(org)
    return org
