from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db import Base
from .genre import movie_genres

class Movie(Base):
    __tablename__ = "movies"
    __table_args__ = (
        UniqueConstraint("title", "release_date", name="uq_movies_title_release_date"),
    )
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(Text, nullable=True)
    release_date = Column(Date, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    genres = relationship("Genre", secondary=movie_genres, back_populates="movies")

    def __repr__(self):
        return f"<Movie(id={self.id}, slug={self.slug})>"
