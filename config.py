import os
from datetime import date
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

class Settings(BaseSettings):
    PROJECT_NAME: str = "CineShelf"
    SECRET_KEY: str = os.getenv("SECRET_KEY", "cineshelf_secret_key_123")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DEFAULT_LANGUAGE: str = os.getenv("DEFAULT_LANGUAGE", "en")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///data/cineshelf.db")

    # Storage bucket (served read-only under STORAGE_URL)
    STORAGE_ROOT: str = os.getenv("STORAGE_ROOT", "data/storage")
    STORAGE_URL: str = os.getenv("STORAGE_URL", "/storage")
    STORAGE_BUCKET: str = os.getenv("STORAGE_BUCKET", "media")

    # Bunny Stream
    BUNNY_API_KEY: Optional[str] = os.getenv("BUNNY_API_KEY")
    BUNNY_LIBRARY_ID: Optional[str] = os.getenv("BUNNY_LIBRARY_ID")
    BUNNY_API_URL: str = "https://video.bunnycdn.com"
    BUNNY_EMBED_URL: str = "https://iframe.mediadelivery.net/embed"

    # Auth0
    AUTH0_DOMAIN: Optional[str] = os.getenv("AUTH0_DOMAIN")
    AUTH0_CLIENT_ID: Optional[str] = os.getenv("AUTH0_CLIENT_ID")
    AUTH0_CLIENT_SECRET: Optional[str] = os.getenv("AUTH0_CLIENT_SECRET")

    # Comma separated, these profiles are created as admins
    ADMIN_EMAILS: str = os.getenv("ADMIN_EMAILS", "")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def admin_emails(self) -> List[str]:
        return [e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()]

    @property
    def bunny_enabled(self) -> bool:
        return bool(self.BUNNY_API_KEY and self.BUNNY_LIBRARY_ID)

    @property
    def min_year(self) -> int:
        return 1900

    @property
    def max_year(self) -> int:
        return date.today().year

settings = Settings()
