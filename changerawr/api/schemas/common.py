"""Common schemas for the Changerawr API.

Payloads use camelCase on the wire; fields are declared in snake_case and
accepted under either name.
"""

from typing import Any, List, Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base for every request and response body."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def create(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages)


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    details: Optional[List[Any]] = None


class MessageResponse(APIModel):
    message: str
