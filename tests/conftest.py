from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base
from app.models import Genre
from app.builder.query_builder import QueryBuilderConfig
from app.create_tables import create_tables, seed_genres
from app.schemas.movie import MovieCreate
from app.services.movie_service import MovieService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def genres(db):
    seed_genres(db)
    return {genre.slug: genre for genre in db.query(Genre).all()}


@pytest.fixture
def query_config():
    return QueryBuilderConfig()


@pytest.fixture
def service(db, query_config):
    return MovieService(db, query_config)


@pytest.fixture
def make_movie(service):
    def _make(title, release_date=date(2020, 1, 1), description=None, genre=None):
        return service.create_movie(
            MovieCreate(
                title=title,
                release_date=release_date,
                description=description,
                genre=genre or [],
            )
        )

    return _make
