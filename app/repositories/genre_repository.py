from typing import List, Sequence
from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.genre import Genre
from app.utils.like import LIKE_ESCAPE, escape_like

class GenreRepository(BaseRepository[Genre]):
    """Read-side genre lookups used by the movie service"""
    
    def __init__(self, db: Session):
        super().__init__(Genre, db)
    
    def find_by_ids(self, ids: Sequence[int]) -> List[Genre]:
        """Genres for the given IDs, silently skipping unknown ones"""
        if not ids:
            return []
        return self.query().filter(Genre.id.in_(list(ids))).all()
    
    def find_ids_by_slug_pattern(self, pattern: str) -> List[int]:
        """IDs of genres whose slug contains ``pattern`` (case-insensitive)"""
        rows = (
            self.db.query(Genre.id)
            .filter(Genre.slug.ilike(f"%{escape_like(pattern)}%", escape=LIKE_ESCAPE))
            .all()
        )
        return [row.id for row in rows]
