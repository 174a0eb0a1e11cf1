from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class MovieBase(BaseModel):
    title: str
    english_title: Optional[str] = None
    slug: str
    image: Optional[str] = None
    time: Optional[str] = None
    trailer: Optional[str] = None
    premiere: Optional[str] = None
    description: Optional[str] = None
    release_year: Optional[int] = None
    rating: float = 0.0
    imdb_id: Optional[str] = None

class MovieCreate(MovieBase):
    category_ids: List[int] = Field(default_factory=list)

class MovieUpdate(BaseModel):
    title: Optional[str] = None
    english_title: Optional[str] = None
    slug: Optional[str] = None
    image: Optional[str] = None
    time: Optional[str] = None
    trailer: Optional[str] = None
    premiere: Optional[str] = None
    description: Optional[str] = None
    release_year: Optional[int] = None
    rating: Optional[float] = None
    imdb_id: Optional[str] = None
    category_ids: Optional[List[int]] = None

class MovieInDBBase(MovieBase):
    id: int
    view_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Movie(MovieInDBBase):
    pass
