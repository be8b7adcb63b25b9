import logging
from datetime import date
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from app.core.exceptions import BadRequestException
from app.repositories.base_repository import BaseRepository
from app.repositories.genre_repository import GenreRepository
from app.models.movie import Movie

logger = logging.getLogger(__name__)

class MovieRepository(BaseRepository[Movie]):
    """Movie repository with movie-specific operations"""
    
    def __init__(self, db: Session):
        super().__init__(Movie, db)
        self.genre_repository = GenreRepository(db)
    
    def find_by_slug(self, slug: str) -> Optional[Movie]:
        """Get movie by slug"""
        return self.find_one(slug=slug)
    
    def exists_by_title_and_release_date(self, title: str, release_date: date) -> bool:
        """Check if a movie with this title and release date exists"""
        return self.exists(title=title, release_date=release_date)
    
    def slug_taken(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        """Check if another movie already uses ``slug``"""
        query = self.query().filter(Movie.slug == slug)
        if exclude_id is not None:
            query = query.filter(Movie.id != exclude_id)
        return query.first() is not None
    
    def unique_slug(self, base_slug: str, exclude_id: Optional[int] = None) -> str:
        """``base_slug``, or ``base_slug-2``, ``-3``... if already used by another movie"""
        slug = base_slug
        counter = 2
        while self.slug_taken(slug, exclude_id):
            slug = f"{base_slug}-{counter}"
            counter += 1
        return slug
    
    def create_movie(self, data: Dict[str, Any]) -> Movie:
        """Create movie, resolving ``genre`` IDs into Genre rows"""
        return self.create(self._resolve_genres(data))
    
    def update_movie(self, movie: Movie, patch: Dict[str, Any]) -> Movie:
        """Apply a partial update, resolving ``genre`` IDs if present"""
        return self.update(movie, self._resolve_genres(patch))
    
    def _resolve_genres(self, data: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(data)
        if "genre" in data:
            genre_ids = list(dict.fromkeys(data.pop("genre") or []))
            genres = self.genre_repository.find_by_ids(genre_ids)
            missing = sorted(set(genre_ids) - {genre.id for genre in genres})
            if missing:
                logger.warning(f"Rejecting payload with unknown genre IDs: {missing}")
                raise BadRequestException(f"Unknown genre IDs: {missing}")
            data["genres"] = genres
        return data
