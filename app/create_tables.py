import logging
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.enums import MovieGenre
from app.core.logging_config import setup_logging
from app.db import engine, Base, SessionLocal
from app.models import Genre
from app.utils.slug import slugify

logger = logging.getLogger(__name__)

def create_tables(bind: Engine = engine) -> None:
    """Create all database tables (idempotent)"""
    Base.metadata.create_all(bind=bind)

def seed_genres(db: Session) -> int:
    """Insert the standard genres that are missing; returns how many were added"""
    existing = {slug for (slug,) in db.query(Genre.slug).all()}
    added = 0
    for genre in MovieGenre:
        slug = slugify(genre.display_name)
        if slug in existing:
            continue
        db.add(Genre(name=genre.display_name, slug=slug))
        added += 1
    db.commit()
    return added

def main():
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    create_tables()
    logger.info("All tables created successfully.")

    db = SessionLocal()
    try:
        added = seed_genres(db)
        logger.info(f"Seeded {added} genres")
    finally:
        db.close()

if __name__ == "__main__":
    main()
