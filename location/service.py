"""
Location hierarchy store.

Locations form a tree per organization. Each row carries a materialized
`path` (see location.paths) that the functions below keep consistent with the
`parent_id` links: create computes it once, move rewrites the moved node and
every descendant inside one transaction, delete refuses to orphan anything.
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Optional, List, Dict, Iterable, Iterator, Sequence
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import NotFoundError, ConflictError, StructuralError
from organization import service as organization_service
from asset.models import Asset
from .models import Location, new_location_id
from .schemas import LocationCreate, LocationUpdate, LocationTree
from . import paths

logger = logging.getLogger(__name__)


def _duplicate_name(name: str) -> ConflictError:
    return ConflictError(f'A location named "{name}" already exists in this location')


CONCURRENT_CHANGE = "Location was changed by a concurrent request"


def _is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg2 exposes pgcode, psycopg 3 sqlstate; sqlite only has the message
    code = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if code is not None:
        return code == "23505"
    return "UNIQUE" in str(exc.orig).upper()


@contextmanager
def _atomic(
    db: Session,
    *,
    duplicate_detail: Optional[str] = None,
    integrity_detail: str = CONCURRENT_CHANGE,
) -> Iterator[None]:
    """Commit the block as one transaction; roll back on any failure.

    Constraint violations caught by the database are reported as a 409:
    unique violations with `duplicate_detail` when given, anything else
    (e.g. a parent deleted underneath us) with `integrity_detail`.
    Everything else propagates unchanged.
    """
    try:
        yield
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Location write rejected by database constraint: %s", exc.orig)
        if duplicate_detail is not None and _is_unique_violation(exc):
            raise ConflictError(duplicate_detail) from exc
        raise ConflictError(integrity_detail) from exc
    except Exception:
        db.rollback()
        raise


def _load_for_org(db: Session, location_id: str, org_id: int, *, lock: bool = False) -> Optional[Location]:
    stmt = select(Location).where(Location.id == location_id, Location.org_id == org_id)
    if lock:
        # a locked read must see the committed row, not what the session cached
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return db.scalars(stmt).first()


def _lock_lineage(db: Session, location: Location, org_id: int, *, missing_detail: str) -> Location:
    """Lock `location` and all of its ancestors FOR UPDATE, root first.

    A mover of any ancestor holds that ancestor's row lock until it commits,
    so once this returns nobody can rewrite `location.path` under us. If the
    path changed while we waited, the new lineage is locked in turn.
    """
    while True:
        lineage = paths.split_path(location.path)
        stmt = (
            select(Location)
            .where(Location.id.in_(lineage), Location.org_id == org_id)
            .order_by(Location.path.asc())
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        locked = {row.id for row in db.scalars(stmt)}
        if location.id not in locked:
            raise NotFoundError(missing_detail)
        if paths.split_path(location.path) == lineage:
            return location


def _sibling_with_name(
    db: Session,
    *,
    org_id: int,
    parent_id: Optional[str],
    name: str,
    exclude_id: Optional[str] = None,
) -> Optional[Location]:
    stmt = select(Location).where(Location.org_id == org_id, Location.name == name)
    if parent_id is None:
        stmt = stmt.where(Location.parent_id.is_(None))
    else:
        stmt = stmt.where(Location.parent_id == parent_id)
    if exclude_id is not None:
        stmt = stmt.where(Location.id != exclude_id)
    return db.scalars(stmt).first()


def _descendants_stmt(org_id: int, path: str):
    return (
        select(Location)
        .where(
            Location.org_id == org_id,
            Location.path.startswith(paths.descendant_prefix(path), autoescape=True),
        )
        .order_by(Location.path.asc())
    )


# ---------- reads ----------

def get_location_for_org(db: Session, location_id: str, org_id: int) -> Optional[Location]:
    return _load_for_org(db, location_id, org_id)

def find_all_flat(db: Session, *, org_id: int) -> List[Location]:
    stmt = select(Location).where(Location.org_id == org_id).order_by(Location.name.asc(), Location.path.asc())
    return list(db.scalars(stmt))

def find_by_ids(db: Session, ids: Sequence[str], org_id: int) -> List[Location]:
    if not ids:
        return []
    stmt = (
        select(Location)
        .where(Location.id.in_(list(ids)), Location.org_id == org_id)
        .order_by(Location.name.asc())
    )
    return list(db.scalars(stmt))

def search_by_name(db: Session, org_id: int, query: str) -> List[Location]:
    stmt = (
        select(Location)
        .where(Location.org_id == org_id, Location.name.icontains(query, autoescape=True))
        .order_by(Location.name.asc())
    )
    return list(db.scalars(stmt))


def build_tree(rows: Iterable[Location]) -> List[LocationTree]:
    """Nest rows under their parents in one pass over an id-keyed map.

    A row whose parent is not among `rows` (a real root, or the top of a
    partial subtree) is returned as a root. Input order is kept among siblings.
    """
    nodes: Dict[str, LocationTree] = {}
    ordered: List[LocationTree] = []
    for row in rows:
        node = LocationTree.model_validate(row)
        nodes[node.id] = node
        ordered.append(node)

    roots: List[LocationTree] = []
    for node in ordered:
        parent = nodes.get(node.parent_id) if node.parent_id is not None else None
        if parent is not None:
            parent.children.append(node)
        else:
            roots.append(node)
    return roots

def find_by_organization(db: Session, org_id: int) -> List[LocationTree]:
    stmt = select(Location).where(Location.org_id == org_id).order_by(Location.path.asc())
    return build_tree(db.scalars(stmt))

def find_subtree(db: Session, location_id: str, org_id: int) -> List[Location]:
    """All descendants of a location (not the location itself), path ordered."""
    location = _load_for_org(db, location_id, org_id)
    if not location:
        raise NotFoundError("Location not found")
    return list(db.scalars(_descendants_stmt(org_id, location.path)))

def find_subtree_tree(db: Session, location_id: str, org_id: int) -> LocationTree:
    location = _load_for_org(db, location_id, org_id)
    if not location:
        raise NotFoundError("Location not found")
    rows = [location, *db.scalars(_descendants_stmt(org_id, location.path))]
    return build_tree(rows)[0]

def find_ancestors(db: Session, location_id: str, org_id: int) -> List[Location]:
    """Ancestors ordered root first, ending with the immediate parent."""
    location = _load_for_org(db, location_id, org_id)
    if not location:
        raise NotFoundError("Location not found")

    ancestor_ids = paths.ancestor_ids(location.path)
    if not ancestor_ids:
        return []
    stmt = select(Location).where(Location.id.in_(ancestor_ids), Location.org_id == org_id)
    by_id = {row.id: row for row in db.scalars(stmt)}
    return [by_id[i] for i in ancestor_ids if i in by_id]


# ---------- writes ----------

def create_location(db: Session, loc: LocationCreate) -> Location:
    with _atomic(db, duplicate_detail=_duplicate_name(loc.name).detail):
        if organization_service.get_organization(db, loc.org_id) is None:
            raise NotFoundError("Organization not found")

        parent: Optional[Location] = None
        if loc.parent_id is not None:
            parent = _load_for_org(db, loc.parent_id, loc.org_id, lock=True)
            if parent is None:
                raise NotFoundError("Parent location not found")
            _lock_lineage(db, parent, loc.org_id, missing_detail="Parent location not found")

        if _sibling_with_name(db, org_id=loc.org_id, parent_id=loc.parent_id, name=loc.name):
            raise _duplicate_name(loc.name)

        location_id = new_location_id()
        db_loc = Location(
            id=location_id,
            org_id=loc.org_id,
            name=loc.name,
            description=loc.description,
            parent_id=loc.parent_id,
            path=paths.build_path(parent.path if parent else None, location_id),
        )
        db.add(db_loc)

    db.refresh(db_loc)
    logger.info("Location %s (%r) created in org %s under %s", db_loc.id, db_loc.name, db_loc.org_id, db_loc.parent_id)
    return db_loc


def _relocate(
    db: Session,
    location: Location,
    new_parent_id: Optional[str],
    org_id: int,
    *,
    name: Optional[str] = None,
) -> Optional[int]:
    """Re-parent `location` and rewrite the paths of its whole subtree.

    Runs inside the caller's transaction and does not commit. `name` is the
    name the node will carry once the caller is done (defaults to its current
    one). Returns the number of descendants rewritten, or None when
    `new_parent_id` is already the parent.
    """
    new_parent: Optional[Location] = None
    if new_parent_id is not None:
        new_parent = _load_for_org(db, new_parent_id, org_id, lock=True)
        if new_parent is None:
            raise NotFoundError("New parent location not found")
        _lock_lineage(db, new_parent, org_id, missing_detail="New parent location not found")

    if location.parent_id == new_parent_id:
        return None

    target_name = name or location.name
    if _sibling_with_name(db, org_id=org_id, parent_id=new_parent_id, name=target_name, exclude_id=location.id):
        raise _duplicate_name(target_name)

    if new_parent is not None and paths.is_same_or_descendant(new_parent.path, location.path):
        raise StructuralError("Cannot move location to be a child of itself or its descendants")

    old_path = location.path
    descendants = list(db.scalars(_descendants_stmt(org_id, old_path).with_for_update()))

    new_base = paths.build_path(new_parent.path if new_parent else None, location.id)
    location.path = new_base
    location.parent_id = new_parent_id
    # only paths change below the moved node; their parent_id links stay as they are
    for descendant in descendants:
        descendant.path = paths.rebase(descendant.path, old_path, new_base)
    return len(descendants)


def move_location(db: Session, location_id: str, new_parent_id: Optional[str], org_id: int) -> Location:
    """Move a location (and implicitly its subtree) under new_parent_id, or to the root when None."""
    with _atomic(db, duplicate_detail="A location with the same name already exists in the target location"):
        location = _load_for_org(db, location_id, org_id, lock=True)
        if location is None:
            raise NotFoundError("Location not found")
        old_parent_id = location.parent_id
        rewritten = _relocate(db, location, new_parent_id, org_id)

    db.refresh(location)
    if rewritten is not None:
        logger.info(
            "Location %s moved from %s to %s (%d descendants rewritten)",
            location.id, old_parent_id, new_parent_id, rewritten,
        )
    return location


def update_location(db: Session, location_id: str, patch: LocationUpdate, org_id: int) -> Location:
    """Rename / re-describe a location; a differing `parent_id` in the patch also moves it."""
    data = patch.model_dump(exclude_unset=True)
    new_name = data.get("name")
    detail = (
        _duplicate_name(new_name).detail
        if new_name
        else "A location with the same name already exists in the target location"
    )

    with _atomic(db, duplicate_detail=detail):
        location = _load_for_org(db, location_id, org_id, lock=True)
        if location is None:
            raise NotFoundError("Location not found")

        is_moving = "parent_id" in data and data["parent_id"] != location.parent_id
        target_parent_id = data["parent_id"] if is_moving else location.parent_id

        # checked against where the node ends up, even if it stays put
        if new_name is not None and new_name != location.name:
            if _sibling_with_name(
                db, org_id=org_id, parent_id=target_parent_id, name=new_name, exclude_id=location.id
            ):
                raise _duplicate_name(new_name)

        if is_moving:
            _relocate(db, location, target_parent_id, org_id, name=new_name)

        if new_name is not None:
            location.name = new_name
        if "description" in data:
            location.description = data["description"]

    db.refresh(location)
    logger.info("Location %s updated (%s)", location.id, ", ".join(sorted(data)) or "no changes")
    return location


def count_children(db: Session, location_id: str) -> int:
    return db.scalar(select(func.count(Location.id)).where(Location.parent_id == location_id)) or 0

def count_assets(db: Session, location_id: str) -> int:
    return db.scalar(select(func.count(Asset.id)).where(Asset.location_id == location_id)) or 0


def delete_location(db: Session, location_id: str, org_id: int) -> None:
    """Delete a single leaf location. Never cascades to children or assets."""
    with _atomic(db, integrity_detail="Cannot delete location that is still referenced"):
        location = _load_for_org(db, location_id, org_id, lock=True)
        if location is None:
            raise NotFoundError("Location not found")
        if count_children(db, location_id) > 0:
            raise ConflictError("Cannot delete location with child locations")
        if count_assets(db, location_id) > 0:
            raise ConflictError("Cannot delete location with assigned assets")
        db.delete(location)

    logger.info("Location %s deleted from org %s", location_id, org_id)
