"""
Movie catalog.

Titles and genres are trimmed and lower-cased before they are stored or
compared, so "  Inception  " and "INCEPTION" name the same movie. A movie
is a duplicate when another one has the same normalized title and release
year. Deleting a movie does not touch the showtimes that reference it.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

import crud
from errors import BadRequestError, ConflictError, NotFoundError
from models import Movie
from scheduling import normalize_name
from schemas import MovieCreate, MovieUpdate

logger = logging.getLogger(__name__)


def _normalized(fields: dict) -> dict:
    for key in ("title", "genre"):
        if isinstance(fields.get(key), str):
            fields[key] = normalize_name(fields[key])
    return fields


def get_movie(db: Session, movie_id: int) -> Movie:
    movie = crud.get_movie(db, movie_id)
    if not movie:
        raise NotFoundError(f"Movie with ID {movie_id} not found.")
    return movie


def get_movie_by_title(db: Session, title: str, release_year: Optional[int] = None) -> Movie:
    """Resolve a movie by title; the latest release wins when no year is given."""
    name = normalize_name(title)
    movie = crud.get_movie_by_title(db, name, release_year)
    if not movie:
        if release_year is None:
            raise NotFoundError(f'Movie with title "{name}" not found.')
        raise NotFoundError(f'Movie with title "{name}" and release year "{release_year}" not found.')
    return movie


def list_movies(db: Session, title: Optional[str] = None, genre: Optional[str] = None) -> List[Movie]:
    return crud.list_movies(
        db,
        title=normalize_name(title) if title else None,
        genre=normalize_name(genre) if genre else None,
    )


def add_movie(db: Session, movie: MovieCreate) -> Movie:
    fields = _normalized(movie.model_dump())

    if crud.get_movie_by_title(db, fields["title"], fields["release_year"]):
        logger.warning("Rejected duplicate movie %r (%s)", fields["title"], fields["release_year"])
        raise ConflictError(
            f'A movie titled "{fields["title"]}" already exists for year {fields["release_year"]}.'
        )

    created = crud.create_movie(db, **fields)
    logger.info("Added movie %s %r", created.id, created.title)
    return created


def update_movie(db: Session, movie_id: int, updates: MovieUpdate) -> Movie:
    existing = get_movie(db, movie_id)

    fields = _normalized(updates.model_dump(exclude_unset=True, exclude_none=True))
    if not fields:
        raise BadRequestError("No fields provided for update.")

    title = fields.get("title", existing.title)
    release_year = fields.get("release_year", existing.release_year)
    if (title, release_year) != (existing.title, existing.release_year):
        clash = crud.get_movie_by_title(db, title, release_year)
        if clash and clash.id != existing.id:
            raise ConflictError(f'A movie titled "{title}" already exists for year {release_year}.')

    updated = crud.update_movie(db, existing, **fields)
    logger.info("Updated movie %s with %s", movie_id, sorted(fields))
    return updated


def delete_movie(db: Session, movie_id: int) -> None:
    movie = get_movie(db, movie_id)
    crud.delete_movie(db, movie)
    logger.info("Deleted movie %s", movie_id)
