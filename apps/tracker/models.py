from typing import Optional
from datetime import datetime, timezone
from enum import Enum
from sqlmodel import SQLModel, Field, Relationship, UniqueConstraint
from apps.catalog.models import MediaItem

class WatchStatus(str, Enum):
    WATCHING = "watching"
    PLAN_TO_WATCH = "plan_to_watch"
    COMPLETED = "completed"

class ActivityType(str, Enum):
    RATING = "rating"
    COMMENT = "comment"
    STATUS = "status"
    WATCH = "watch"

class UserMediaStatus(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("user_id", "media_id", name="unique_user_media_status"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="profile.id", index=True)
    media_id: int = Field(foreign_key="mediaitem.id", index=True)

    status: WatchStatus = Field(default=WatchStatus.PLAN_TO_WATCH)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    media: Optional[MediaItem] = Relationship()

class UserActivity(SQLModel, table=True):
    """Audit log of rating, comment, status and watch events."""
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="profile.id", index=True)
    media_id: Optional[int] = Field(default=None, foreign_key="mediaitem.id", index=True)

    activity_type: ActivityType
    value: Optional[str] = None # rating value, status, comment excerpt
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    media: Optional[MediaItem] = Relationship()
