from app.db import Base
from .genre import Genre, movie_genres
from .movie import Movie

__all__ = ['Base', 'Genre', 'Movie', 'movie_genres']
