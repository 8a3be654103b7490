from typing import Optional, List
from datetime import datetime, timezone
from enum import Enum
from sqlmodel import SQLModel, Field, Relationship, UniqueConstraint

class MediaType(str, Enum):
    MOVIE = "movie"
    TV = "tv"

class PersonRole(str, Enum):
    ACTOR = "actor"
    DIRECTOR = "director"

CASCADE = {"cascade": "all, delete-orphan"}

class MediaGenre(SQLModel, table=True):
    media_id: int = Field(foreign_key="mediaitem.id", primary_key=True)
    genre_id: int = Field(foreign_key="genre.id", primary_key=True)

class Genre(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    name_ru: Optional[str] = None

    media_items: List["MediaItem"] = Relationship(back_populates="genres", link_model=MediaGenre)

    def display_name(self, language: str = "en") -> str:
        if language == "ru" and self.name_ru:
            return self.name_ru
        return self.name

class MediaItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(index=True)
    original_title: Optional[str] = None
    media_type: MediaType = Field(default=MediaType.MOVIE, index=True)
    description: str = ""
    year: Optional[int] = Field(default=None, index=True)
    duration: Optional[int] = None # Minutes
    poster_url: Optional[str] = None
    video_url: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    genres: List[Genre] = Relationship(back_populates="media_items", link_model=MediaGenre)
    media_persons: List["MediaPerson"] = Relationship(back_populates="media", sa_relationship_kwargs=CASCADE)
    ratings: List["Rating"] = Relationship(back_populates="media", sa_relationship_kwargs=CASCADE)
    comments: List["Comment"] = Relationship(back_populates="media", sa_relationship_kwargs=CASCADE)
    views: List["MediaView"] = Relationship(back_populates="media", sa_relationship_kwargs=CASCADE)

class Person(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    photo_url: Optional[str] = None

    media_persons: List["MediaPerson"] = Relationship(back_populates="person")

class MediaPerson(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    media_id: int = Field(foreign_key="mediaitem.id", index=True)
    person_id: int = Field(foreign_key="person.id", index=True)
    role: PersonRole
    character_name: Optional[str] = None # Actors only

    media: Optional[MediaItem] = Relationship(back_populates="media_persons")
    person: Optional[Person] = Relationship(back_populates="media_persons")

class Rating(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("media_id", "user_id", name="unique_media_rating"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    media_id: int = Field(foreign_key="mediaitem.id", index=True)
    user_id: int = Field(foreign_key="profile.id", index=True)
    rating: int = Field(ge=1, le=5)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    media: Optional[MediaItem] = Relationship(back_populates="ratings")

class Comment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    media_id: int = Field(foreign_key="mediaitem.id", index=True)
    user_id: int = Field(foreign_key="profile.id", index=True)
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    media: Optional[MediaItem] = Relationship(back_populates="comments")

class MediaView(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    media_id: int = Field(foreign_key="mediaitem.id", index=True)
    user_id: Optional[int] = Field(default=None, foreign_key="profile.id")
    viewed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    media: Optional[MediaItem] = Relationship(back_populates="views")
