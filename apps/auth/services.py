import logging
from typing import Optional, Dict, Any
from fastapi import UploadFile
from sqlmodel import Session, select

from apps.auth.models import Profile
from apps.core.base_service import BaseService
from apps.core.storage import StorageService
from config import settings

logger = logging.getLogger(__name__)

class AuthService(BaseService):

    def __init__(self, session: Session, storage: Optional[StorageService] = None):
        super().__init__(session)
        self.storage = storage or StorageService()

    def get_user_by_email(self, email: str) -> Optional[Profile]:
        return self.session.exec(select(Profile).where(Profile.email == email)).first()

    def get_or_create_from_userinfo(self, user_info: Dict[str, Any]) -> Profile:
        """
        Maps the identity provider's userinfo (sub, email, nickname, name,
        picture) onto a profile, creating it on first login.
        """
        email = user_info.get("email")
        if not email:
            raise ValueError("Identity provider returned no email")

        user = self.get_user_by_email(email)
        if not user:
            username = user_info.get("nickname") or user_info.get("name") or email.split("@")[0]
            user = Profile(
                email=email,
                username=username,
                external_id=user_info.get("sub"),
                avatar_url=user_info.get("picture"),
                is_admin=email.lower() in settings.admin_emails,
            )
            logger.info("Creating profile for %s", email)
        else:
            if not user.external_id:
                user.external_id = user_info.get("sub")
            if not user.avatar_url:
                user.avatar_url = user_info.get("picture")

        return self.save(user)

    def update_profile(
        self,
        user: Profile,
        username: Optional[str] = None,
        avatar: Optional[UploadFile] = None
    ) -> Profile:
        if username and username.strip():
            user.username = username.strip()

        if avatar and avatar.filename:
            if not (avatar.content_type or "").startswith("image/"):
                raise ValueError("Avatar must be an image")
            user.avatar_url = self.storage.upload_file("avatars", f"user_{user.id}_{avatar.filename}", avatar.file)

        return self.save(user)
