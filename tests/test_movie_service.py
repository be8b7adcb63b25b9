from datetime import date

import pytest
from sqlalchemy import inspect

from app.core.exceptions import (
    BadRequestException, MovieAlreadyExistsException, MovieNotFoundException,
    NotFoundException, SlugUpdateNotAllowedException,
)
from app.models import Movie
from app.schemas.movie import MovieCreate, MovieResponse, MovieUpdate


def titles(movies):
    return sorted(movie.title for movie in movies)


# create

def test_create_movie_sets_slug_and_defaults(service):
    movie = service.create_movie(MovieCreate(title="Dune", release_date=date(2021, 10, 22), description="Spice"))
    assert movie.id is not None
    assert movie.slug == "dune-2021-10-22"
    assert movie.is_deleted is False
    assert movie.genres == []


def test_create_movie_accepts_plain_dicts(service):
    movie = service.create_movie({"title": "Dune", "release_date": "2021-10-22"})
    assert movie.release_date == date(2021, 10, 22)


def test_create_movie_ignores_client_slug(service):
    movie = service.create_movie({"title": "Dune", "release_date": "2021-10-22", "slug": "hacked"})
    assert movie.slug == "dune-2021-10-22"


def test_create_duplicate_movie_fails(service):
    service.create_movie(MovieCreate(title="Dune", release_date=date(2021, 10, 22)))

    with pytest.raises(MovieAlreadyExistsException) as exc_info:
        service.create_movie(MovieCreate(title="Dune", release_date=date(2021, 10, 22)))
    assert isinstance(exc_info.value, BadRequestException)
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Movie already exists!"


def test_create_same_title_other_date_succeeds(service):
    first = service.create_movie(MovieCreate(title="Dune", release_date=date(2021, 10, 22)))
    second = service.create_movie(MovieCreate(title="Dune", release_date=date(2024, 3, 1)))
    assert first.slug != second.slug
    assert second.slug == "dune-2024-03-01"


def test_storage_constraint_catches_duplicates_past_the_check(service, make_movie, monkeypatch):
    make_movie("Dune", date(2021, 10, 22))
    monkeypatch.setattr(service.movie_repository, "exists_by_title_and_release_date", lambda *args: False)

    with pytest.raises(MovieAlreadyExistsException):
        service.create_movie(MovieCreate(title="Dune", release_date=date(2021, 10, 22)))

    # session was rolled back and is still usable
    assert service.get_movie_by_slug("dune-2021-10-22") is not None


def test_create_movie_links_genres(service, genres):
    drama = genres["drama"]
    thriller = genres["thriller"]
    movie = service.create_movie(
        MovieCreate(title="Heat", release_date=date(1995, 12, 15), genre=[drama.id, thriller.id])
    )
    assert sorted(genre.slug for genre in movie.genres) == ["drama", "thriller"]


# read

def test_get_movie_by_slug(service, make_movie):
    created = make_movie("Dune", date(2021, 10, 22))
    assert service.get_movie_by_slug("dune-2021-10-22").id == created.id
    assert service.get_movie_by_slug("missing-2000-01-01") is None


def test_get_all_movies_search_and_pagination(service, make_movie):
    for i in range(7):
        make_movie(f"Star Trek {i}", date(1979 + i, 12, 7))
    make_movie("Alien", date(1979, 5, 25), description="In space no one can hear you scream")

    found = service.get_all_movies({"searchTerm": "STAR"})
    assert len(found) == 7

    page_two = service.get_all_movies({"searchTerm": "star", "page": 2, "limit": 5, "sort": "title"})
    assert [movie.title for movie in page_two] == ["Star Trek 5", "Star Trek 6"]

    by_description = service.get_all_movies({"searchTerm": "SPACE"})
    assert titles(by_description) == ["Alien"]


def test_get_all_movies_does_not_filter_by_genre(service, make_movie, genres):
    make_movie("Heat", genre=[genres["crime"].id])
    make_movie("Up", date(2009, 5, 29), genre=[genres["animation"].id])

    result = service.get_all_movies({"genre": "crime"})
    assert titles(result) == ["Heat", "Up"]


def test_get_all_movies_filters_on_columns(service, make_movie):
    make_movie("Heat")
    gone = make_movie("Gone", date(2021, 1, 1))
    service.delete_movie(gone.id)

    assert titles(service.get_all_movies({"is_deleted": "false"})) == ["Heat"]
    # soft-deleted movies are not hidden implicitly
    assert titles(service.get_all_movies({})) == ["Gone", "Heat"]


def test_get_all_movies_populates_genres(db, service, make_movie, genres):
    make_movie("Heat", genre=[genres["crime"].id])
    db.expunge_all()

    movie = service.get_all_movies({})[0]
    assert "genres" not in inspect(movie).unloaded
    assert [genre.slug for genre in movie.genres] == ["crime"]


def test_get_movies_meta(service, make_movie):
    for i in range(12):
        make_movie(f"Movie {i}", date(2000 + i, 1, 1))

    meta = service.get_movies_meta({"limit": 5, "page": 2})
    assert (meta.page, meta.limit, meta.total, meta.total_page) == (2, 5, 12, 3)


# update

def test_update_title_recomputes_slug(service, make_movie):
    movie = make_movie("Dune", date(2021, 10, 22))
    updated = service.update_movie(movie.id, MovieUpdate(title="Dune Part One"))
    assert updated.title == "Dune Part One"
    assert updated.slug == "dune-part-one-2021-10-22"


def test_update_release_date_keeps_title_in_slug(service, make_movie):
    movie = make_movie("Dune", date(2021, 10, 22))
    updated = service.update_movie(movie.id, {"release_date": "2021-09-03"})
    assert updated.slug == "dune-2021-09-03"


def test_update_unrelated_fields_keeps_slug(service, make_movie, genres):
    movie = make_movie("Dune", date(2021, 10, 22))
    updated = service.update_movie(
        movie.id, MovieUpdate(description="Spice must flow", genre=[genres["science-fiction"].id])
    )
    assert updated.slug == "dune-2021-10-22"
    assert updated.description == "Spice must flow"
    assert [genre.slug for genre in updated.genres] == ["science-fiction"]


def test_update_with_slug_always_fails(service, make_movie):
    movie = make_movie("Dune", date(2021, 10, 22))

    with pytest.raises(SlugUpdateNotAllowedException) as exc_info:
        service.update_movie(movie.id, MovieUpdate(slug="custom"))
    assert exc_info.value.status_code == 400

    with pytest.raises(SlugUpdateNotAllowedException):
        service.update_movie(movie.id, {"title": "Other", "description": "x", "slug": ""})

    # the slug check comes before the lookup
    with pytest.raises(SlugUpdateNotAllowedException):
        service.update_movie(9999, {"slug": "custom"})

    assert service.get_movie_by_slug("dune-2021-10-22") is not None


def test_update_missing_movie_is_not_found(service):
    with pytest.raises(MovieNotFoundException) as exc_info:
        service.update_movie(9999, MovieUpdate(title="Ghost"))
    assert isinstance(exc_info.value, NotFoundException)
    assert exc_info.value.status_code == 404


def test_update_onto_existing_title_and_date_fails(service, make_movie):
    make_movie("Dune", date(2021, 10, 22))
    other = make_movie("Dune", date(1984, 12, 14))

    with pytest.raises(MovieAlreadyExistsException):
        service.update_movie(other.id, MovieUpdate(release_date=date(2021, 10, 22)))


def test_update_ignores_explicit_nulls_for_required_fields(service, make_movie):
    movie = make_movie("Dune", date(2021, 10, 22), description="Spice")
    updated = service.update_movie(movie.id, {"title": None, "description": None})
    assert updated.title == "Dune"
    assert updated.description is None
    assert updated.slug == "dune-2021-10-22"


# search

def test_search_by_genre_fragment(service, make_movie, genres):
    make_movie("Interstellar", date(2014, 11, 7), genre=[genres["science-fiction"].id, genres["drama"].id])
    make_movie("Heat", date(1995, 12, 15), genre=[genres["crime"].id])
    make_movie("Up", date(2009, 5, 29), genre=[genres["animation"].id, genres["adventure"].id])

    assert titles(service.search_movies({"genre": "SCI"})) == ["Interstellar"]
    assert titles(service.search_movies({"genre": "dr"})) == ["Interstellar"]
    # "ad" hits adventure only; "E" hits science-fiction, crime and adventure
    assert titles(service.search_movies({"genre": "ad"})) == ["Up"]
    assert titles(service.search_movies({"genre": "E"})) == ["Heat", "Interstellar", "Up"]


def test_search_with_unmatched_genre_returns_nothing(service, make_movie, genres):
    make_movie("Heat", genre=[genres["crime"].id])
    assert service.search_movies({"genre": "zzz"}) == []


def test_search_without_genre_behaves_like_list(service, make_movie, genres):
    make_movie("Heat", genre=[genres["crime"].id])
    make_movie("Up", date(2009, 5, 29))
    assert titles(service.search_movies({})) == ["Heat", "Up"]


def test_search_combines_genre_and_search_term(service, make_movie, genres):
    crime = genres["crime"].id
    make_movie("Heat", description="Heist in Los Angeles", genre=[crime])
    make_movie("The Town", date(2010, 9, 17), description="Boston bank heist", genre=[crime])
    make_movie("Ocean's Eleven", date(2001, 12, 7), description="Casino heist", genre=[genres["comedy"].id])

    result = service.search_movies({"genre": "crime", "searchTerm": "heist", "sort": "title"})
    assert [movie.title for movie in result] == ["Heat", "The Town"]

    paged = service.search_movies({"genre": "crime", "page": 2, "limit": 1, "sort": "title"})
    assert [movie.title for movie in paged] == ["The Town"]


# delete

def test_delete_is_soft(service, make_movie):
    movie = make_movie("Dune", date(2021, 10, 22))
    deleted = service.delete_movie(movie.id)
    assert deleted.is_deleted is True

    stored = service.movie_repository.find_by_id(movie.id)
    assert stored is not None
    assert stored.is_deleted is True


def test_delete_missing_movie_returns_none(service):
    assert service.delete_movie(9999) is None


def test_movie_response_serializes_populated_movie(service, make_movie, genres):
    movie = make_movie("Heat", date(1995, 12, 15), genre=[genres["crime"].id])
    response = MovieResponse.model_validate(service.get_all_movies({})[0])
    assert response.slug == movie.slug
    assert response.genres[0].name == "Crime"


# slug collisions between different (title, release_date) pairs

def test_create_with_colliding_slug_gets_suffix(service):
    first = service.create_movie({"title": "Dune", "release_date": "2021-10-22"})
    second = service.create_movie({"title": "DUNE!", "release_date": "2021-10-22"})
    third = service.create_movie({"title": "dune?", "release_date": "2021-10-22"})

    assert first.slug == "dune-2021-10-22"
    assert second.slug == "dune-2021-10-22-2"
    assert third.slug == "dune-2021-10-22-3"
    assert service.get_movie_by_slug("dune-2021-10-22-2").title == "DUNE!"


def test_symbol_only_titles_on_same_date_both_succeed(service):
    first = service.create_movie({"title": "!!!", "release_date": "2001-01-01"})
    second = service.create_movie({"title": "???", "release_date": "2001-01-01"})
    assert {first.slug, second.slug} == {"2001-01-01", "2001-01-01-2"}


def test_update_into_colliding_slug_gets_suffix(service, make_movie):
    make_movie("Dune", date(2021, 10, 22))
    other = make_movie("Arrival", date(2021, 10, 22))

    updated = service.update_movie(other.id, MovieUpdate(title="DUNE!"))
    assert updated.slug == "dune-2021-10-22-2"


def test_update_keeps_own_slug_without_suffix(service, make_movie):
    movie = make_movie("Dune", date(2021, 10, 22))
    updated = service.update_movie(movie.id, {"title": "Dune", "description": "again"})
    assert updated.slug == "dune-2021-10-22"


# unknown genre ids

def test_create_with_unknown_genre_is_rejected(service, genres):
    with pytest.raises(BadRequestException) as exc_info:
        service.create_movie(
            MovieCreate(title="Heat", release_date=date(1995, 12, 15), genre=[genres["crime"].id, 10 ** 6])
        )
    assert str(10 ** 6) in exc_info.value.message
    assert service.get_movie_by_slug("heat-1995-12-15") is None


def test_update_with_unknown_genre_is_rejected(service, make_movie, genres):
    movie = make_movie("Heat", date(1995, 12, 15), genre=[genres["crime"].id])

    with pytest.raises(BadRequestException):
        service.update_movie(movie.id, MovieUpdate(genre=[10 ** 6]))

    stored = service.movie_repository.find_by_id(movie.id)
    assert [genre.slug for genre in stored.genres] == ["crime"]
