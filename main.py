import logging
import os
from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional

from fastapi import FastAPI, Depends, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import bookings, catalog, crud, scheduler, schemas
from config import CatalogLimits, Config
from database import SessionLocal, init_db
from errors import CinemaError, PersistenceError

logger = logging.getLogger(__name__)


# --------------------------------------------------
# DB DEPENDENCY
# --------------------------------------------------
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# --------------------------------------------------
# ERRORS
# --------------------------------------------------
async def cinema_error_handler(request: Request, exc: CinemaError):
    if isinstance(exc, PersistenceError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# --------------------------------------------------
# MOVIES
# --------------------------------------------------
def register_movie_routes(app: FastAPI):

    @app.post("/movies", response_model=schemas.MovieRead, status_code=status.HTTP_201_CREATED)
    def create_movie(movie: schemas.MovieCreate, db: Session = Depends(get_db)):
        return catalog.add_movie(db, movie)

    @app.get("/movies", response_model=List[schemas.MovieRead])
    def list_movies(
        title: Optional[str] = Query(None, description="Search by movie title"),
        genre: Optional[str] = None,
        db: Session = Depends(get_db),
    ):
        return catalog.list_movies(db, title=title, genre=genre)

    @app.get("/movies/lookup", response_model=schemas.MovieRead)
    def lookup_movie(
        title: str = Query(..., min_length=1),
        release_year: Optional[int] = Query(None, ge=CatalogLimits.MIN_RELEASE_YEAR),
        db: Session = Depends(get_db),
    ):
        return catalog.get_movie_by_title(db, title, release_year)

    @app.get("/movies/{movie_id}", response_model=schemas.MovieRead)
    def get_movie_by_id(movie_id: int, db: Session = Depends(get_db)):
        return catalog.get_movie(db, movie_id)

    @app.patch("/movies/{movie_id}", response_model=schemas.MovieRead)
    def update_movie(movie_id: int, movie: schemas.MovieUpdate, db: Session = Depends(get_db)):
        return catalog.update_movie(db, movie_id, movie)

    @app.delete("/movies/{movie_id}", response_model=schemas.Message)
    def delete_movie(movie_id: int, db: Session = Depends(get_db)):
        catalog.delete_movie(db, movie_id)
        return {"message": f"Movie with ID {movie_id} successfully deleted."}


# --------------------------------------------------
# SHOWTIMES
# --------------------------------------------------
def register_showtime_routes(app: FastAPI):

    @app.get("/showtimes", response_model=List[schemas.ShowtimeRead])
    def list_showtimes(
        movie_id: Optional[int] = None,
        theater: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        db: Session = Depends(get_db),
    ):
        return scheduler.list_showtimes(
            db, movie_id=movie_id, theater=theater, start_date=start_date, end_date=end_date
        )

    @app.post("/showtimes", response_model=schemas.ShowtimeRead, status_code=status.HTTP_201_CREATED)
    def create_showtime(show: schemas.ShowtimeCreate, db: Session = Depends(get_db)):
        return scheduler.add_showtime(db, show)

    @app.get("/showtimes/{showtime_id}", response_model=schemas.ShowtimeDetail)
    def get_showtime(showtime_id: int, db: Session = Depends(get_db)):
        return scheduler.get_showtime_detail(db, showtime_id)

    @app.patch("/showtimes/{showtime_id}", response_model=schemas.ShowtimeRead)
    def update_showtime(showtime_id: int, show: schemas.ShowtimeUpdate, db: Session = Depends(get_db)):
        return scheduler.update_showtime(db, showtime_id, show)

    @app.delete("/showtimes/{showtime_id}", response_model=schemas.Message)
    def delete_showtime(showtime_id: int, db: Session = Depends(get_db)):
        scheduler.delete_showtime(db, showtime_id)
        return {"message": f"Showtime with ID {showtime_id} successfully deleted."}

    @app.get("/showtimes/{showtime_id}/bookings", response_model=List[schemas.BookingRead])
    def list_showtime_bookings(showtime_id: int, db: Session = Depends(get_db)):
        return bookings.list_bookings(db, showtime_id)


# --------------------------------------------------
# BOOKINGS
# --------------------------------------------------
def register_booking_routes(app: FastAPI):

    @app.post("/bookings", response_model=schemas.BookingRead, status_code=status.HTTP_201_CREATED)
    def create_booking(booking: schemas.BookingCreate, db: Session = Depends(get_db)):
        return bookings.add_booking(db, booking)


# --------------------------------------------------
# APP
# --------------------------------------------------
def create_app(create_tables: bool = True) -> FastAPI:
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            init_db()
        yield

    app = FastAPI(
        title="Cinema Booking API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CinemaError, cinema_error_handler)

    @app.get("/health")
    def health(db: Session = Depends(get_db)):
        crud.ping(db)
        return {"status": "ok", "database": "connected"}

    register_movie_routes(app)
    register_showtime_routes(app)
    register_booking_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
