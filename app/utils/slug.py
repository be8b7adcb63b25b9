from datetime import date, datetime
from typing import Union

from slugify import slugify as _slugify

DateLike = Union[date, datetime, str]

def slugify(text: str) -> str:
    """Lowercase ASCII slug; non-Latin scripts are transliterated"""
    return _slugify(text)

def _release_date_part(release_date: DateLike) -> str:
    if isinstance(release_date, datetime):
        return release_date.date().isoformat()
    if isinstance(release_date, date):
        return release_date.isoformat()
    # ISO strings may carry a time component: "2021-10-22T00:00:00Z"
    return date.fromisoformat(str(release_date)[:10]).isoformat()

def generate_movie_slug(title: str, release_date: DateLike) -> str:
    """Build the movie slug from its title and full release date.

    >>> generate_movie_slug("Dune: Part Two", date(2024, 3, 1))
    'dune-part-two-2024-03-01'
    """
    title_part = slugify(title)
    date_part = _release_date_part(release_date)
    return f"{title_part}-{date_part}" if title_part else date_part
