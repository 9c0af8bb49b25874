"""
Error taxonomy raised by the service layer.

Each error is an HTTPException so it reaches the client verbatim,
the same way the other services report 404/409/422.
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Organization, location or parent is missing or belongs to another tenant."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Sibling name collision, or a delete blocked by dependents."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class StructuralError(HTTPException):
    """The requested change would break the tree shape (e.g. a cycle)."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
