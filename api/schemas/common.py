"""Common Pydantic schemas shared across the API."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys; accepts either case on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationParams(BaseModel):
    """Pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    limit: int = Field(default=10, ge=1, le=100, description="Items per page")

    @property
    def offset(self) -> int:
        """Calculate offset from page and limit."""
        return (self.page - 1) * self.limit


class PaginationMeta(CamelModel):
    """Pagination block returned alongside a page of results."""

    current_page: int = Field(ge=1)
    total_pages: int = Field(ge=0)
    total_count: int = Field(ge=0)
    has_next: bool
    has_prev: bool

    @classmethod
    def create(cls, total: int, pagination: PaginationParams) -> "PaginationMeta":
        total_pages = (total + pagination.limit - 1) // pagination.limit
        return cls(
            current_page=pagination.page,
            total_pages=total_pages,
            total_count=total,
            has_next=pagination.page < total_pages,
            has_prev=pagination.page > 1,
        )


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Error code for programmatic handling")
    details: Optional[dict | list] = Field(None, description="Extra detail (validation, debug)")
