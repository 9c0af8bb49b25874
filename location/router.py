from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from core.database import get_db
from authz.deps import require_member
from .schemas import (
    LocationSchema,
    LocationTree,
    LocationCreatePayload,
    LocationCreate,
    LocationUpdate,
    LocationMovePayload,
)
from . import service

location_router = APIRouter(prefix="/locations", tags=["Locations"])

# List locations: flat (default), by name search, or by id set
@location_router.get("", response_model=List[LocationSchema])
def list_locations(
    search: Optional[str] = Query(None, description="Case-insensitive name filter"),
    ids: Optional[List[str]] = Query(None, description="Only these location ids"),
    db: Session = Depends(get_db),
    org_id: int = Depends(require_member),
):
    if ids:
        return service.find_by_ids(db, ids, org_id)
    if search:
        return service.search_by_name(db, org_id, search)
    return service.find_all_flat(db, org_id=org_id)

# Create location
@location_router.post("", response_model=LocationSchema, status_code=status.HTTP_201_CREATED)
def location_post(payload: LocationCreatePayload, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    internal = LocationCreate(org_id=org_id, **payload.model_dump())
    return service.create_location(db, internal)

# Whole tree, or the subtree under root_id
@location_router.get("/tree", response_model=List[LocationTree])
def location_tree(
    root_id: Optional[str] = Query(None, description="Return only this location and its descendants"),
    db: Session = Depends(get_db),
    org_id: int = Depends(require_member),
):
    if root_id:
        return [service.find_subtree_tree(db, root_id, org_id)]
    return service.find_by_organization(db, org_id)

# Get location by id
@location_router.get("/{location_id}", response_model=LocationSchema)
def location_detail(location_id: str, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    obj = service.get_location_for_org(db, location_id, org_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Location not found")
    return obj

# Update location (name, description, and optionally parent)
@location_router.patch("/{location_id}", response_model=LocationSchema)
def location_patch(location_id: str, payload: LocationUpdate, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    return service.update_location(db, location_id, payload, org_id)

# Delete location (leaf only)
@location_router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def location_delete(location_id: str, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    service.delete_location(db, location_id, org_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# Move location and its subtree
@location_router.post("/{location_id}/move", response_model=LocationSchema)
def location_move(location_id: str, payload: LocationMovePayload, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    return service.move_location(db, location_id, payload.new_parent_id, org_id)

# Breadcrumb: root first, immediate parent last
@location_router.get("/{location_id}/ancestors", response_model=List[LocationSchema])
def location_ancestors(location_id: str, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    return service.find_ancestors(db, location_id, org_id)

@location_router.get("/{location_id}/descendants", response_model=List[LocationSchema])
def location_descendants(location_id: str, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    return service.find_subtree(db, location_id, org_id)
