from .like import LIKE_ESCAPE, escape_like
from .slug import slugify, generate_movie_slug

__all__ = ["LIKE_ESCAPE", "escape_like", "slugify", "generate_movie_slug"]
