# app/models/movie.py
"""
Movie model for the catalog

- Category associations (many-to-many)
- Seasons/episodes for multi-part titles
- Monotonic view counter
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, Table
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base

# Association table for many-to-many relationship between movies and categories
movie_categories = Table(
    'movie_categories',
    Base.metadata,
    Column('movie_id', Integer, ForeignKey('movies.id', ondelete='CASCADE'), primary_key=True),
    Column('category_id', Integer, ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True)
)


class Movie(Base):
    """
    Catalog movie.

    `id` is assigned in creation order and doubles as the recency key
    for listings. Single-feature movies have no seasons.
    """
    __tablename__ = "movies"

    # ==================== PRIMARY KEY ====================
    id = Column(Integer, primary_key=True, index=True)

    # ==================== BASIC INFO ====================
    title = Column(String(255), nullable=False, index=True)
    english_title = Column(String(255), nullable=True, index=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)

    # ==================== MEDIA ====================
    image = Column(String(500), nullable=True)  # Poster URL
    trailer = Column(String(500), nullable=True)

    # ==================== MOVIE DETAILS ====================
    time = Column(String(50), nullable=True)  # Free-form running time, e.g. "120 min"
    premiere = Column(String(50), nullable=True)
    release_year = Column(Integer, nullable=True)
    rating = Column(Float, default=0.0)
    imdb_id = Column(String(20), nullable=True)

    # ==================== METADATA ====================
    view_count = Column(Integer, default=0, nullable=False, index=True)

    # ==================== TIMESTAMPS ====================
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # ==================== RELATIONSHIPS ====================
    categories = relationship(
        "Category",
        secondary=movie_categories,
        back_populates="movies"
    )

    # Seasons are persisted on their own and survive movie deletion
    seasons = relationship(
        "Season",
        back_populates="movie",
        order_by="Season.number"
    )

    def __repr__(self):
        return f"<Movie(id={self.id}, slug='{self.slug}', views={self.view_count})>"

    @property
    def is_single_episode(self) -> bool:
        """Exactly one season holding exactly one episode (seasons must be loaded)"""
        return len(self.seasons) == 1 and len(self.seasons[0].episodes) == 1
