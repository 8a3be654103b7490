from sqlmodel import select

from apps.catalog.models import Genre, MediaPerson, Person
from check_orphans import find_orphans
from conftest import add_person, make_genre, make_media
from scripts.seed_genres import GENRES, seed_genres


def test_seed_genres_is_idempotent(session):
    make_genre(session, "Drama", "Драма")

    assert seed_genres(session) == len(GENRES) - 1
    assert seed_genres(session) == 0

    crime = session.exec(select(Genre).where(Genre.name == "Crime")).one()
    assert crime.display_name("ru") == "Криминал"


def test_find_orphans(session):
    crime = make_genre(session, "Crime")
    linked = make_media(session, "Heat", genres=[crime])
    add_person(session, linked, "Al Pacino")
    make_media(session, "Untagged")
    session.add(Person(name="Nobody"))
    session.commit()

    people, media = find_orphans(session)

    assert [p.name for p in people] == ["Nobody"]
    assert [m.title for m in media] == ["Untagged"]
    assert len(session.exec(select(MediaPerson)).all()) == 1
