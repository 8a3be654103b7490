import logging
from typing import Optional, Dict, List
from datetime import datetime, timezone
from sqlmodel import select, col
from sqlalchemy.orm import selectinload
from apps.core.base_service import BaseService
from apps.catalog.models import MediaItem
from apps.tracker.models import UserMediaStatus, UserActivity, WatchStatus, ActivityType

logger = logging.getLogger(__name__)

class TrackerService(BaseService):

    def log_activity(self, user_id: int, media_id: Optional[int], activity_type: ActivityType,
                     value: Optional[str] = None) -> UserActivity:
        activity = UserActivity(
            user_id=user_id,
            media_id=media_id,
            activity_type=activity_type,
            value=value
        )
        return self.save(activity)

    def get_recent_activity(self, user_id: int, limit: int = 20) -> List[UserActivity]:
        return self.session.exec(
            select(UserActivity)
            .where(UserActivity.user_id == user_id)
            .options(selectinload(UserActivity.media))
            .order_by(col(UserActivity.created_at).desc(), col(UserActivity.id).desc())
            .limit(limit)
        ).all()

    def get_user_status(self, user_id: int, media_id: int) -> Optional[UserMediaStatus]:
        return self.session.exec(
            select(UserMediaStatus).where(UserMediaStatus.user_id == user_id, UserMediaStatus.media_id == media_id)
        ).first()

    def update_status(self, user_id: int, media_id: int, status: WatchStatus) -> UserMediaStatus:
        """
        Create or update the user's status for a media item.
        """
        status = WatchStatus(status)
        if not self.session.get(MediaItem, media_id):
            raise ValueError(f"Media item {media_id} does not exist")

        user_status = self.get_user_status(user_id, media_id)
        if not user_status:
            user_status = UserMediaStatus(user_id=user_id, media_id=media_id, status=status)
        else:
            user_status.status = status
            user_status.updated_at = datetime.now(timezone.utc)

        self.save(user_status)
        self.log_activity(user_id, media_id, ActivityType.STATUS, status.value)
        return user_status

    def remove_user_media(self, user_id: int, media_id: int) -> bool:
        """
        Removes a movie/show from the user's list.
        """
        user_status = self.get_user_status(user_id, media_id)
        if not user_status:
            return False

        self.session.delete(user_status)
        self.session.commit()
        return True

    def get_watchlist(self, user_id: int) -> Dict[str, List[MediaItem]]:
        rows = self.session.exec(
            select(UserMediaStatus)
            .where(UserMediaStatus.user_id == user_id)
            .options(selectinload(UserMediaStatus.media))
            .order_by(col(UserMediaStatus.updated_at).desc(), col(UserMediaStatus.id).desc())
        ).all()

        watchlist = {status.value: [] for status in WatchStatus}
        for row in rows:
            if row.media:
                watchlist[WatchStatus(row.status).value].append(row.media)
        return watchlist

    def delete_for_media(self, media_id: int) -> None:
        """Drops statuses and activities that point at a media item."""
        for model in (UserMediaStatus, UserActivity):
            rows = self.session.exec(select(model).where(model.media_id == media_id)).all()
            for row in rows:
                self.session.delete(row)
        self.session.commit()
