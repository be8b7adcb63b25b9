import logging
from typing import Any, Dict, List, Mapping, Optional, Union
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from app.builder.query_builder import QueryBuilder, QueryBuilderConfig
from app.core.exceptions import (
    MovieAlreadyExistsException, MovieNotFoundException, SlugUpdateNotAllowedException
)
from app.models.genre import Genre
from app.models.movie import Movie
from app.repositories.genre_repository import GenreRepository
from app.repositories.movie_repository import MovieRepository
from app.schemas.movie import MovieCreate, MovieUpdate
from app.schemas.query import QueryParams, PaginationMeta
from app.utils.slug import generate_movie_slug

logger = logging.getLogger(__name__)

MOVIE_SEARCHABLE_FIELDS = ["title", "description"]
# Genre is a relation; search_movies matches it by slug instead
MOVIE_FILTER_EXCLUDED_KEYS = ["genre"]

QueryInput = Union[QueryParams, Mapping[str, Any], None]

class MovieService:
    """Movie catalog operations on top of the movie and genre repositories"""

    def __init__(self, db: Session, query_config: Optional[QueryBuilderConfig] = None):
        self.db = db
        self.query_config = query_config or QueryBuilderConfig.from_settings()
        self.movie_repository = MovieRepository(db)
        self.genre_repository = GenreRepository(db)

    def create_movie(self, movie_data: Union[MovieCreate, Dict[str, Any]]) -> Movie:
        """Create a movie; (title, release_date) must be unused"""
        if not isinstance(movie_data, MovieCreate):
            movie_data = MovieCreate.model_validate(movie_data)

        logger.info(f"Creating movie: {movie_data.title} ({movie_data.release_date})")
        if self.movie_repository.exists_by_title_and_release_date(movie_data.title, movie_data.release_date):
            raise MovieAlreadyExistsException()

        data = movie_data.model_dump()
        data["slug"] = self.movie_repository.unique_slug(
            generate_movie_slug(movie_data.title, movie_data.release_date)
        )
        try:
            movie = self.movie_repository.create_movie(data)
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same movie
            logger.error(f"Error creating movie: {str(e)}")
            raise MovieAlreadyExistsException()

        logger.info(f"Movie created successfully with ID: {movie.id}")
        return movie

    def get_all_movies(self, query: QueryInput = None) -> List[Movie]:
        """List movies with search, filter, pagination, sorting and field selection"""
        return self._movie_query(query).options(selectinload(Movie.genres)).all()

    def get_movies_meta(self, query: QueryInput = None) -> PaginationMeta:
        """Pagination meta matching get_all_movies for the same query"""
        return self._movie_query(query).count_total()

    def get_movie_by_slug(self, slug: str) -> Optional[Movie]:
        """Get movie by slug"""
        return self.movie_repository.find_by_slug(slug)

    def update_movie(self, movie_id: int, movie_data: Union[MovieUpdate, Dict[str, Any]]) -> Movie:
        """Partially update a movie, recomputing the slug when title or release date change"""
        if not isinstance(movie_data, MovieUpdate):
            movie_data = MovieUpdate.model_validate(movie_data)

        patch = movie_data.model_dump(exclude_unset=True)
        if "slug" in patch:
            raise SlugUpdateNotAllowedException()

        movie = self.movie_repository.find_by_id(movie_id)
        if not movie:
            raise MovieNotFoundException(f"Movie with ID {movie_id} not found")

        # title, release_date and genre cannot be cleared
        patch = {k: v for k, v in patch.items() if v is not None or k == "description"}

        if "title" in patch or "release_date" in patch:
            title = patch.get("title", movie.title)
            release_date = patch.get("release_date", movie.release_date)
            duplicate = self.movie_repository.find_one(title=title, release_date=release_date)
            if duplicate and duplicate.id != movie.id:
                raise MovieAlreadyExistsException()
            patch["slug"] = self.movie_repository.unique_slug(
                generate_movie_slug(title, release_date), exclude_id=movie.id
            )

        try:
            updated = self.movie_repository.update_movie(movie, patch)
        except IntegrityError as e:
            logger.error(f"Error updating movie {movie_id}: {str(e)}")
            raise MovieAlreadyExistsException()

        logger.info(f"Movie {movie_id} updated: {sorted(patch)}")
        return updated

    def search_movies(self, query: QueryInput = None) -> List[Movie]:
        """Like get_all_movies, additionally matching ``genre`` against genre slugs"""
        builder = self._movie_query(query)
        genre_pattern = builder.params.filters.get("genre")
        if genre_pattern:
            genre_ids = self.genre_repository.find_ids_by_slug_pattern(str(genre_pattern))
            logger.info(f"Genre pattern '{genre_pattern}' matched {len(genre_ids)} genres")
            builder = builder.where(Movie.genres.any(Genre.id.in_(genre_ids)))
        return builder.options(selectinload(Movie.genres)).all()

    def delete_movie(self, movie_id: int) -> Optional[Movie]:
        """Soft-delete: flag the movie, keep the row"""
        movie = self.movie_repository.find_by_id_and_update(movie_id, {"is_deleted": True})
        if movie is None:
            logger.warning(f"Delete requested for missing movie {movie_id}")
        return movie

    def _movie_query(self, query: QueryInput) -> QueryBuilder[Movie]:
        return (
            QueryBuilder(Movie, self.movie_repository.query(), query, self.query_config)
            .search(MOVIE_SEARCHABLE_FIELDS)
            .filter(MOVIE_FILTER_EXCLUDED_KEYS)
            .paginate()
            .sort()
            .fields()
        )
