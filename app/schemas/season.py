from pydantic import BaseModel
from typing import List, Optional

class EpisodeBase(BaseModel):
    number: int
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[int] = None

class Episode(EpisodeBase):
    id: int
    season_id: Optional[int] = None

    class Config:
        from_attributes = True

class SeasonBase(BaseModel):
    number: int
    title: Optional[str] = None

class Season(SeasonBase):
    id: int
    movie_id: Optional[int] = None
    episodes: List[Episode] = []

    class Config:
        from_attributes = True
