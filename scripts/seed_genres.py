import sys
import os
sys.path.append(os.getcwd())

from sqlmodel import Session, select
from database import engine, create_db_and_tables
from apps.catalog.models import Genre

GENRES = [
    ("Action", "Боевик"),
    ("Adventure", "Приключения"),
    ("Animation", "Мультфильм"),
    ("Comedy", "Комедия"),
    ("Crime", "Криминал"),
    ("Documentary", "Документальный"),
    ("Drama", "Драма"),
    ("Fantasy", "Фэнтези"),
    ("Horror", "Ужасы"),
    ("Romance", "Мелодрама"),
    ("Science Fiction", "Фантастика"),
    ("Thriller", "Триллер"),
]

def seed_genres(session: Session) -> int:
    """Inserts the missing genres, returns how many were added."""
    existing = {g.name for g in session.exec(select(Genre)).all()}
    added = 0
    for name, name_ru in GENRES:
        if name in existing:
            continue
        session.add(Genre(name=name, name_ru=name_ru))
        added += 1
    session.commit()
    return added

if __name__ == "__main__":
    create_db_and_tables()
    with Session(engine) as session:
        added = seed_genres(session)
        print(f"Added {added} genres ({len(GENRES) - added} already present).")
