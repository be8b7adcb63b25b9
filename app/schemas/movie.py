from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime

class GenreResponse(BaseModel):
    """Genre as embedded in a populated movie"""
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True

class MovieCreate(BaseModel):
    """Create movie"""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    release_date: date = Field(..., description="Release date, used in the slug")
    genre: List[int] = Field(default_factory=list, description="Genre IDs")

class MovieUpdate(BaseModel):
    """Partial movie update; only fields explicitly sent are applied"""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    release_date: Optional[date] = None
    genre: Optional[List[int]] = None
    # Accepted only so that the service can refuse it
    slug: Optional[str] = None

class MovieResponse(BaseModel):
    """Movie response"""
    id: int
    title: str
    description: Optional[str] = None
    release_date: date
    slug: str
    is_deleted: bool
    genres: List[GenreResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
