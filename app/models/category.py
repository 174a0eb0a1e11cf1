# app/models/category.py
"""Category model - Groups movies by type (Action, Drama, Anime, etc)"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base
from .movie import movie_categories


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    movies = relationship("Movie", secondary=movie_categories, back_populates="categories")

    def __repr__(self):
        return f"<Category(id={self.id}, slug={self.slug})>"
