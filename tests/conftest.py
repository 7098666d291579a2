from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import catalog
import main
import scheduler
from database import Base, init_db
from schemas import MovieCreate, ShowtimeCreate
from tests.helpers import at


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    app = main.create_app(create_tables=False)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[main.get_db] = override_get_db
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_movie(db):
    def _make(title="Inception", genre="Sci-Fi", duration=120, rating=8.8, release_year=2010):
        return catalog.add_movie(
            db,
            MovieCreate(title=title, genre=genre, duration=duration, rating=rating, release_year=release_year),
        )
    return _make


@pytest.fixture
def make_showtime(db):
    def _make(movie, start="14:00", theater="Hall A", price=10.0):
        start_time = at(start)
        return scheduler.add_showtime(
            db,
            ShowtimeCreate(
                movie_id=movie.id,
                theater=theater,
                start_time=start_time,
                end_time=start_time + timedelta(minutes=movie.duration),
                price=price,
            ),
        )
    return _make
