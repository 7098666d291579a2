# seed_from_json.py
import argparse
import json
import re
from datetime import datetime, timedelta

from pydantic import ValidationError

from database import SessionLocal, engine, init_db, reset_db
import catalog
import scheduler
from errors import CinemaError, ConflictError
from schemas import MovieCreate, ShowtimeCreate


# -------------------------------------------------------
# RESET DATABASE (DROP EVERYTHING)
# -------------------------------------------------------
def reset_database(bind=None):
    print("⚠️ WARNING: Dropping ALL tables...")
    reset_db(bind or engine)
    print("✅ Tables recreated.\n")


# -------------------------------------------------------
# TIME PARSING HELPERS
# -------------------------------------------------------
def parse_time_str(text: str):
    m = re.search(r"(\d{1,2}:\d{2})(?:\s*(AM|PM|am|pm))?", text or "")
    if not m:
        return None

    hhmm = m.group(1)
    ampm = m.group(2)

    try:
        if ampm:
            return datetime.strptime(f"{hhmm} {ampm.upper()}", "%I:%M %p").time()
        return datetime.strptime(hhmm, "%H:%M").time()
    except ValueError:
        return None


def parse_date(date_str: str):
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


# -------------------------------------------------------
# SEEDER
# -------------------------------------------------------
def _movie_for(db, entry: dict):
    movie_in = MovieCreate(
        title=entry.get("title") or "Unknown",
        genre=entry.get("genre") or "unknown",
        duration=entry["duration"],
        rating=entry.get("rating", 0),
        release_year=entry["release_year"],
    )
    try:
        return catalog.add_movie(db, movie_in)
    except ConflictError:
        return catalog.get_movie_by_title(db, movie_in.title, movie_in.release_year)


def seed_data(db, data: dict) -> dict:
    """Load movies and their showtimes through the catalog and scheduler rules.

    Entries the rules reject are reported and skipped. Returns counters.
    """
    stats = {"movies": 0, "showtimes": 0, "skipped": 0}

    for m in data.get("movies", []):
        try:
            movie = _movie_for(db, m)
        except (KeyError, ValidationError, CinemaError) as e:
            print(f"❌ Skipping movie {m.get('title')!r}: {e}")
            stats["skipped"] += 1
            continue
        stats["movies"] += 1

        for show in m.get("showtimes", []):
            show_date = parse_date(show.get("date")) or datetime.now().date()

            for t in show.get("times", []):
                time_val = parse_time_str(t)
                if not time_val:
                    print(f"   ⚠️ Unreadable time {t!r}")
                    stats["skipped"] += 1
                    continue

                start = datetime.combine(show_date, time_val)
                try:
                    scheduler.add_showtime(
                        db,
                        ShowtimeCreate(
                            movie_id=movie.id,
                            theater=show.get("theater", ""),
                            start_time=start,
                            end_time=start + timedelta(minutes=movie.duration),
                            price=show.get("price", 0),
                        ),
                    )
                except (ValidationError, CinemaError) as e:
                    print(f"   ⚠️ {movie.title} @ {start:%Y-%m-%d %H:%M}: {e}")
                    stats["skipped"] += 1
                    continue
                stats["showtimes"] += 1

    return stats


def seed_file(file_path: str) -> dict:
    print(f"🌱 Seeding {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    db = SessionLocal()
    try:
        stats = seed_data(db, data)
    finally:
        db.close()

    print(f"✅ Finished seeding: {stats['movies']} movies, {stats['showtimes']} showtimes, {stats['skipped']} skipped\n")
    return stats


# -------------------------------------------------------
# MAIN
# -------------------------------------------------------
def main(argv=None):
    parser = argparse.ArgumentParser(description="Load movies and showtimes from a JSON file.")
    parser.add_argument("path", help="JSON file with a top-level 'movies' list")
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args(argv)

    if args.reset:
        reset_database()
    else:
        init_db()

    seed_file(args.path)
    print("🎉 Seeding complete.")


if __name__ == "__main__":
    main()
