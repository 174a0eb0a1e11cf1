from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class Season(Base):
    """
    Season of a multi-part movie, addressed by `number` within its movie
    """
    __tablename__ = "seasons"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Identification
    number = Column(Integer, nullable=False, comment="Season number within the movie")
    title = Column(String(255), nullable=True)

    # Foreign Keys
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="SET NULL"), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    movie = relationship("Movie", back_populates="seasons")
    episodes = relationship("Episode", back_populates="season", order_by="Episode.number")

    def __repr__(self):
        return f"<Season(id={self.id}, movie_id={self.movie_id}, number={self.number})>"


class Episode(Base):
    """
    Episode within a season
    """
    __tablename__ = "episodes"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Episode Identification
    number = Column(Integer, nullable=False, comment="Episode number within the season")

    # Basic Information
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    # Media Files
    thumbnail_url = Column(String(500), nullable=True)
    video_url = Column(String(500), nullable=True, comment="Video file URL or streaming link")
    duration = Column(Integer, nullable=True, comment="Duration in seconds")

    # Foreign Keys
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="SET NULL"), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    season = relationship("Season", back_populates="episodes")

    def __repr__(self):
        return f"<Episode(id={self.id}, season_id={self.season_id}, number={self.number})>"
