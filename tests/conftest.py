import io
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="cineshelf-storage-")
os.environ["BUNNY_API_KEY"] = ""
os.environ["BUNNY_LIBRARY_ID"] = ""
os.environ["AUTH0_DOMAIN"] = ""

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine
from starlette.datastructures import Headers

from main import app
from database import get_session
from apps.auth.deps import get_current_user
from apps.auth.models import Profile
from apps.catalog.models import Genre, MediaItem, MediaType, MediaGenre, Person, MediaPerson, PersonRole, Rating
from apps.core.storage import StorageService


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


class CurrentUser:
    profile = None


@pytest.fixture
def current_user():
    return CurrentUser()


@pytest.fixture
def client(session, current_user):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_current_user] = lambda: current_user.profile
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def storage(tmp_path):
    return StorageService(root=str(tmp_path), bucket="media", base_url="/storage")


def make_upload(filename, content=b"data", content_type="image/jpeg"):
    return UploadFile(file=io.BytesIO(content), filename=filename, headers=Headers({"content-type": content_type}))


def make_profile(session, username="alice", is_admin=False, email=None):
    profile = Profile(username=username, email=email or f"{username}@example.com", is_admin=is_admin)
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


def make_genre(session, name, name_ru=None):
    genre = Genre(name=name, name_ru=name_ru)
    session.add(genre)
    session.commit()
    session.refresh(genre)
    return genre


def make_media(session, title, media_type=MediaType.MOVIE, year=2000, description="", original_title=None,
               genres=(), ratings=(), duration=100, video_url=None):
    media = MediaItem(
        title=title,
        original_title=original_title,
        media_type=media_type,
        description=description,
        year=year,
        duration=duration,
        video_url=video_url,
    )
    session.add(media)
    session.commit()
    session.refresh(media)

    for genre in genres:
        session.add(MediaGenre(media_id=media.id, genre_id=genre.id))
    for index, value in enumerate(ratings):
        rater = make_profile(session, username=f"rater{media.id}_{index}")
        session.add(Rating(media_id=media.id, user_id=rater.id, rating=value))
    session.commit()
    session.refresh(media)
    return media


def add_person(session, media, name, role=PersonRole.ACTOR, character=None, photo_url=None):
    person = Person(name=name, photo_url=photo_url)
    session.add(person)
    session.commit()
    session.refresh(person)
    session.add(MediaPerson(media_id=media.id, person_id=person.id, role=role, character_name=character))
    session.commit()
    return person
