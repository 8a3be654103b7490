from typing import Optional, List, Dict, Any, Tuple
from fastapi import UploadFile
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from config import settings
from apps.catalog.models import MediaType

def has_file(upload: Optional[UploadFile]) -> bool:
    """Browsers post an empty part for untouched file inputs."""
    return upload is not None and bool(upload.filename)

class PersonEntry(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = ""
    character: Optional[str] = None
    photo: Optional[UploadFile] = None

    @field_validator("name", "character", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value

class MediaFormData(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, validate_default=True)

    title: str = ""
    original_title: Optional[str] = None
    media_type: MediaType = MediaType.MOVIE
    description: str = ""
    year: int = Field(default_factory=lambda: settings.max_year)
    duration: int = 0
    genre_ids: List[int] = Field(default_factory=list)
    poster: Optional[UploadFile] = None
    video: Optional[UploadFile] = None
    actors: List[PersonEntry] = Field(default_factory=list)
    directors: List[PersonEntry] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value

    @field_validator("description")
    @classmethod
    def description_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value

    @field_validator("original_title")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("year")
    @classmethod
    def year_in_range(cls, value: int) -> int:
        if value < settings.min_year or value > settings.max_year:
            raise ValueError(f"Year must be between {settings.min_year} and {settings.max_year}")
        return value

    @field_validator("duration", mode="before")
    @classmethod
    def blank_duration(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0
        return value

    @field_validator("duration")
    @classmethod
    def duration_required(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Duration is required")
        return value

    @field_validator("genre_ids")
    @classmethod
    def genres_required(cls, value: List[int]) -> List[int]:
        if not value:
            raise ValueError("Select at least one genre")
        return list(dict.fromkeys(value))

    @field_validator("poster")
    @classmethod
    def poster_is_image(cls, value: Optional[UploadFile]) -> Optional[UploadFile]:
        if not has_file(value):
            return None
        if not (value.content_type or "").startswith("image/"):
            raise ValueError("Poster must be an image")
        return value

    @field_validator("video")
    @classmethod
    def video_is_video(cls, value: Optional[UploadFile]) -> Optional[UploadFile]:
        if not has_file(value):
            return None
        if not (value.content_type or "").startswith("video/"):
            raise ValueError("Video must be a video file")
        return value

    @field_validator("actors", "directors")
    @classmethod
    def drop_blank_people(cls, value: List[PersonEntry]) -> List[PersonEntry]:
        people = [p for p in value if p.name]
        for person in people:
            if has_file(person.photo) and not (person.photo.content_type or "").startswith("image/"):
                raise ValueError(f"Photo for {person.name} must be an image")
            if not has_file(person.photo):
                person.photo = None
        return people

def form_errors(exc: Exception) -> Dict[str, str]:
    """Flattens a validation failure into `{field: message}` for the template."""
    if not isinstance(exc, ValidationError):
        return {"__all__": str(exc)}

    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__all__"
        message = err["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors

def build_people(names: List[str], photos: List[Optional[UploadFile]],
                 characters: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    """Zips the repeated form fields of the actor/director rows."""
    people = []
    for index, name in enumerate(names):
        entry: Dict[str, Any] = {"name": name}
        if characters is not None:
            entry["character"] = characters[index] if index < len(characters) else None
        entry["photo"] = photos[index] if index < len(photos) else None
        people.append(entry)
    return people

def validate_media_form(values: Dict[str, Any], is_update: bool = False) -> Tuple[Optional[MediaFormData], Dict[str, str]]:
    """
    Validates submitted form values. Poster and video are required when
    creating; an edit keeps the stored URLs when they are left out.
    """
    errors: Dict[str, str] = {}
    form = None
    try:
        form = MediaFormData(**values)
    except ValidationError as exc:
        errors = form_errors(exc)

    if not is_update:
        if not has_file(values.get("poster")):
            errors.setdefault("poster", "Poster is required")
        if not has_file(values.get("video")):
            errors.setdefault("video", "Video is required")

    if errors:
        return None, errors
    return form, {}
