"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.
"""

from pydantic import BaseModel, Field, HttpUrl


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    url: HttpUrl = Field(..., description="The long URL to shorten")


class ShortenResponse(BaseModel):
    """Response model for URL shortening endpoint."""
    id: int = Field(..., description="Identifier of the stored record")
    short_code: str = Field(..., description="The generated short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    created_at: str
    visit_count: int


class DecodeRequest(BaseModel):
    """Request model for the decode endpoint."""
    short_url: HttpUrl = Field(..., description="A complete short URL")


class DecodeResponse(BaseModel):
    short_url: str
    original_url: str


class StatsResponse(BaseModel):
    """Response model for statistics endpoint."""
    id: int
    original_url: str
    short_code: str
    short_url: str
    created_at: str
    visit_count: int


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class URLListResponse(BaseModel):
    """Response model for the listing endpoint."""
    data: list[StatsResponse]
    pagination: Pagination
