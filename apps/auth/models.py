from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone

class Profile(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True)
    username: str = Field(index=True)
    avatar_url: Optional[str] = None # Public URL in the storage bucket
    is_admin: bool = Field(default=False)
    external_id: Optional[str] = Field(default=None, index=True) # Auth0 Sub ID
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
