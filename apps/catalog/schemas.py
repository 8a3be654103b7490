from typing import Optional, List
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from config import settings
from apps.catalog.models import MediaType

class SortOption(str, Enum):
    RATING = "rating"
    VIEWS = "views"
    NEWEST = "newest"
    OLDEST = "oldest"

class DiscoverFilters(BaseModel):
    search: str = ""
    media_type: str = "all" # all, movie, tv
    genre_ids: List[int] = Field(default_factory=list)
    year_from: int = Field(default_factory=lambda: settings.min_year)
    year_to: int = Field(default_factory=lambda: settings.max_year)
    min_rating: float = Field(default=0, ge=0, le=5)
    sort: SortOption = SortOption.RATING
    language: str = Field(default_factory=lambda: settings.DEFAULT_LANGUAGE)

    @field_validator("media_type")
    @classmethod
    def check_media_type(cls, value: str) -> str:
        if value not in ("all", MediaType.MOVIE.value, MediaType.TV.value):
            raise ValueError("Unknown media type")
        return value

    @property
    def search_terms(self) -> List[str]:
        return self.search.lower().strip().split()

class GenreView(BaseModel):
    id: int
    name: str

class CastMember(BaseModel):
    person_id: int
    name: str
    photo_url: Optional[str] = None
    character: Optional[str] = None

class MediaCard(BaseModel):
    id: int
    title: str
    original_title: Optional[str] = None
    media_type: MediaType
    year: Optional[int] = None
    duration: Optional[int] = None
    poster_url: Optional[str] = None
    genres: List[GenreView] = Field(default_factory=list)
    average_rating: float = 0
    rating_count: int = 0
    view_count: int = 0
    actors: List[CastMember] = Field(default_factory=list)
    directors: List[CastMember] = Field(default_factory=list)

class CommentView(BaseModel):
    id: int
    content: str
    created_at: datetime
    user_id: int
    username: Optional[str] = None
    avatar_url: Optional[str] = None

class MediaDetail(MediaCard):
    description: str = ""
    video_url: Optional[str] = None
    embed_url: str = ""
    comments: List[CommentView] = Field(default_factory=list)
    user_rating: Optional[int] = None
    user_status: Optional[str] = None

    @property
    def is_embed(self) -> bool:
        return self.embed_url.startswith(settings.BUNNY_EMBED_URL)
