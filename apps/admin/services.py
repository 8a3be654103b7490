import logging
from typing import Optional, Dict, Any, List
from fastapi import UploadFile
from sqlmodel import Session, select, col, func
from sqlalchemy.orm import selectinload
from apps.core.base_service import BaseService
from apps.core.bunny import BunnyService
from apps.core.storage import StorageService
from apps.auth.models import Profile
from apps.catalog.models import MediaItem, MediaGenre, MediaPerson, Person, PersonRole
from apps.admin.forms import MediaFormData, PersonEntry
from apps.tracker.services import TrackerService
from config import settings

logger = logging.getLogger(__name__)

class AdminService(BaseService):

    def list_users(self) -> List[Profile]:
        return self.session.exec(select(Profile).order_by(Profile.id)).all()

    def list_media(self) -> List[MediaItem]:
        return self.session.exec(select(MediaItem).order_by(col(MediaItem.created_at).desc(), col(MediaItem.id).desc())).all()

    def get_stats(self) -> Dict[str, int]:
        return {
            "total_users": self.session.exec(select(func.count(Profile.id))).one(),
            "total_media": self.session.exec(select(func.count(MediaItem.id))).one(),
            "admin_users": self.session.exec(select(func.count(Profile.id)).where(Profile.is_admin == True)).one(),  # noqa: E712
        }

    def set_admin(self, user_id: int, is_admin: bool) -> Profile:
        profile = self.session.get(Profile, user_id)
        if not profile:
            raise ValueError(f"User {user_id} does not exist")
        profile.is_admin = is_admin
        return self.save(profile)

    def delete_media(self, media_id: int) -> bool:
        media = self.session.get(MediaItem, media_id)
        if not media:
            return False
        TrackerService(self.session).delete_for_media(media_id)
        # Genre links go with the many-to-many, the rest cascade from MediaItem
        self.session.delete(media)
        self.session.commit()
        return True

class MediaAuthoringService(BaseService):
    """
    Creates and updates a media item together with its genres and people.

    Every step commits on its own, there is no surrounding transaction: when a
    later step fails, the rows and uploads written before it stay in place.
    """

    def __init__(self, session: Session, storage: Optional[StorageService] = None,
                 bunny: Optional[BunnyService] = None):
        super().__init__(session)
        self.storage = storage or StorageService()
        self.bunny = bunny

    async def close(self):
        if self.bunny is not None:
            await self.bunny.close()

    def get_media(self, media_id: int) -> Optional[MediaItem]:
        return self.session.exec(
            select(MediaItem)
            .where(MediaItem.id == media_id)
            .options(
                selectinload(MediaItem.genres),
                selectinload(MediaItem.media_persons).selectinload(MediaPerson.person),
            )
        ).first()

    def form_values(self, media: MediaItem) -> Dict[str, Any]:
        """Current state of a media item in the shape the form template expects."""
        people = sorted(media.media_persons, key=lambda mp: mp.id)
        return {
            "title": media.title,
            "original_title": media.original_title or "",
            "media_type": media.media_type.value,
            "description": media.description,
            "year": media.year,
            "duration": media.duration,
            "genre_ids": [g.id for g in media.genres],
            "actors": [
                {"name": mp.person.name, "character": mp.character_name or ""}
                for mp in people if mp.role == PersonRole.ACTOR and mp.person
            ],
            "directors": [
                {"name": mp.person.name}
                for mp in people if mp.role == PersonRole.DIRECTOR and mp.person
            ],
            "poster_url": media.poster_url,
            "video_url": media.video_url,
        }

    def upload_image(self, folder: str, upload: UploadFile) -> str:
        return self.storage.upload_file(folder, upload.filename, upload.file)

    async def upload_video(self, upload: UploadFile) -> str:
        if self.bunny is None and settings.bunny_enabled:
            self.bunny = BunnyService()

        if self.bunny is not None:
            content = await upload.read()
            return await self.bunny.upload(upload.filename, content)

        return self.storage.upload_file("videos", upload.filename, upload.file)

    async def create_media(self, form: MediaFormData) -> MediaItem:
        # 1. Uploads first, their URLs go into the row
        poster_url = self.upload_image("posters", form.poster)
        video_url = await self.upload_video(form.video)

        # 2. The media item itself
        media = self.save(MediaItem(
            title=form.title,
            original_title=form.original_title,
            media_type=form.media_type,
            description=form.description,
            year=form.year,
            duration=form.duration,
            poster_url=poster_url,
            video_url=video_url
        ))
        logger.info("Created media item %s (%s)", media.id, media.title)

        # 3. Relations
        self.add_genres(media.id, form.genre_ids)
        self.add_people(media.id, form.actors, PersonRole.ACTOR)
        self.add_people(media.id, form.directors, PersonRole.DIRECTOR)
        return media

    async def update_media(self, media_id: int, form: MediaFormData) -> MediaItem:
        media = self.session.get(MediaItem, media_id)
        if not media:
            raise ValueError(f"Media item {media_id} does not exist")

        if form.poster is not None:
            media.poster_url = self.upload_image("posters", form.poster)
        if form.video is not None:
            media.video_url = await self.upload_video(form.video)

        media.title = form.title
        media.original_title = form.original_title
        media.media_type = form.media_type
        media.description = form.description
        media.year = form.year
        media.duration = form.duration
        self.save(media)
        logger.info("Updated media item %s (%s)", media.id, media.title)

        # Relations are replaced wholesale
        self.clear_relations(media_id)
        self.add_genres(media_id, form.genre_ids)
        self.add_people(media_id, form.actors, PersonRole.ACTOR)
        self.add_people(media_id, form.directors, PersonRole.DIRECTOR)

        self.session.refresh(media)
        return media

    def clear_relations(self, media_id: int) -> None:
        for model in (MediaGenre, MediaPerson):
            rows = self.session.exec(select(model).where(model.media_id == media_id)).all()
            for row in rows:
                self.session.delete(row)
        self.session.commit()

    def add_genres(self, media_id: int, genre_ids: List[int]) -> None:
        for genre_id in genre_ids:
            self.save(MediaGenre(media_id=media_id, genre_id=genre_id))

    def find_or_create_person(self, entry: PersonEntry) -> Person:
        photo_url = None
        if entry.photo is not None:
            photo_url = self.upload_image("persons", entry.photo)

        person = self.session.exec(select(Person).where(Person.name == entry.name)).first()
        if not person:
            return self.save(Person(name=entry.name, photo_url=photo_url))

        if photo_url:
            person.photo_url = photo_url
            self.save(person)
        return person

    def add_people(self, media_id: int, people: List[PersonEntry], role: PersonRole) -> None:
        for entry in people:
            person = self.find_or_create_person(entry)
            self.save(MediaPerson(
                media_id=media_id,
                person_id=person.id,
                role=role,
                character_name=entry.character if role == PersonRole.ACTOR else None
            ))
