from fastapi import Header

def require_member(x_org_id: int = Header(..., description="Tenant id set by the upstream auth layer")) -> int:
    """Organization the caller acts for; every location query is scoped to it."""
    return x_org_id
