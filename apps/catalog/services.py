import logging
from typing import Optional, List
from datetime import datetime, timezone
from sqlmodel import select, col, or_
from sqlalchemy.orm import selectinload
from apps.core.base_service import BaseService
from apps.core.bunny import embed_url_for
from apps.auth.models import Profile
from apps.catalog.models import MediaItem, MediaType, MediaGenre, MediaPerson, Genre, Rating, Comment, MediaView
from apps.catalog.schemas import DiscoverFilters, GenreView, MediaCard, MediaDetail, CommentView
from apps.catalog.aggregation import build_card, filter_and_sort
from apps.tracker.models import ActivityType
from apps.tracker.services import TrackerService

logger = logging.getLogger(__name__)

def escape_like(term: str) -> str:
    """Makes `%` and `_` match literally in a LIKE pattern."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

# Joined rows every card needs
CARD_OPTIONS = (
    selectinload(MediaItem.genres),
    selectinload(MediaItem.ratings),
    selectinload(MediaItem.views),
    selectinload(MediaItem.media_persons).selectinload(MediaPerson.person),
)

class CatalogService(BaseService):

    @property
    def tracker(self) -> TrackerService:
        return TrackerService(self.session)

    def list_genres(self, language: str = "en") -> List[GenreView]:
        genres = self.session.exec(select(Genre).order_by(Genre.name)).all()
        return [GenreView(id=g.id, name=g.display_name(language)) for g in genres]

    def build_discover_query(self, filters: DiscoverFilters):
        query = select(MediaItem).options(*CARD_OPTIONS)

        # Any term in any text column
        terms = filters.search_terms
        if terms:
            columns = (col(MediaItem.title), col(MediaItem.original_title), col(MediaItem.description))
            patterns = [f"%{escape_like(term)}%" for term in terms]
            query = query.where(or_(*[c.ilike(p, escape="\\") for p in patterns for c in columns]))

        if filters.media_type != "all":
            query = query.where(MediaItem.media_type == MediaType(filters.media_type))

        if filters.genre_ids:
            genre_match = select(MediaGenre.media_id).where(col(MediaGenre.genre_id).in_(filters.genre_ids))
            query = query.where(col(MediaItem.id).in_(genre_match))

        query = query.where(
            col(MediaItem.year) >= filters.year_from,
            col(MediaItem.year) <= filters.year_to
        )
        return query.order_by(col(MediaItem.id))

    def discover(self, filters: DiscoverFilters) -> List[MediaCard]:
        items = self.session.exec(self.build_discover_query(filters)).all()
        logger.debug("Discover query returned %d rows", len(items))

        cards = [build_card(item, filters.language) for item in items]
        return filter_and_sort(cards, filters.min_rating, filters.sort)

    def latest(self, limit: int = 8, language: str = "en") -> List[MediaCard]:
        items = self.session.exec(
            select(MediaItem).options(*CARD_OPTIONS)
            .order_by(col(MediaItem.created_at).desc(), col(MediaItem.id).desc())
            .limit(limit)
        ).all()
        return [build_card(item, language) for item in items]

    def get_media_detail(self, media_id: int, user_id: Optional[int] = None,
                         language: str = "en") -> Optional[MediaDetail]:
        item = self.session.exec(
            select(MediaItem)
            .where(MediaItem.id == media_id)
            .options(*CARD_OPTIONS, selectinload(MediaItem.comments))
        ).first()
        if not item:
            return None

        card = build_card(item, language)
        comments = sorted(item.comments, key=lambda c: (c.created_at, c.id), reverse=True)

        # Authors in one query instead of one per comment
        profiles = {}
        user_ids = {c.user_id for c in comments}
        if user_ids:
            rows = self.session.exec(select(Profile).where(col(Profile.id).in_(user_ids))).all()
            profiles = {p.id: p for p in rows}

        comment_views = []
        for c in comments:
            author = profiles.get(c.user_id)
            comment_views.append(CommentView(
                id=c.id,
                content=c.content,
                created_at=c.created_at,
                user_id=c.user_id,
                username=author.username if author else None,
                avatar_url=author.avatar_url if author else None,
            ))

        user_rating = None
        user_status = None
        if user_id:
            own = next((r for r in item.ratings if r.user_id == user_id), None)
            user_rating = own.rating if own else None
            status = self.tracker.get_user_status(user_id, media_id)
            user_status = status.status.value if status else None

        return MediaDetail(
            **card.model_dump(),
            description=item.description,
            video_url=item.video_url,
            embed_url=embed_url_for(item.video_url),
            comments=comment_views,
            user_rating=user_rating,
            user_status=user_status,
        )

    def record_view(self, media_id: int, user_id: Optional[int] = None) -> MediaView:
        view = self.save(MediaView(media_id=media_id, user_id=user_id))
        if user_id:
            self.tracker.log_activity(user_id, media_id, ActivityType.WATCH)
        return view

    def rate(self, user: Profile, media_id: int, rating: int) -> Rating:
        """Upsert on (media_id, user_id)."""
        if rating < 1 or rating > 5:
            raise ValueError("Rating must be between 1 and 5")
        if not self.session.get(MediaItem, media_id):
            raise ValueError(f"Media item {media_id} does not exist")

        existing = self.session.exec(
            select(Rating).where(Rating.media_id == media_id, Rating.user_id == user.id)
        ).first()
        if existing:
            existing.rating = rating
            existing.updated_at = datetime.now(timezone.utc)
        else:
            existing = Rating(media_id=media_id, user_id=user.id, rating=rating)

        self.save(existing)
        self.tracker.log_activity(user.id, media_id, ActivityType.RATING, str(rating))
        return existing

    def add_comment(self, user: Profile, media_id: int, content: str) -> Optional[Comment]:
        content = (content or "").strip()
        if not content:
            return None
        if not self.session.get(MediaItem, media_id):
            raise ValueError(f"Media item {media_id} does not exist")

        comment = self.save(Comment(media_id=media_id, user_id=user.id, content=content))
        self.tracker.log_activity(user.id, media_id, ActivityType.COMMENT, content[:100])
        return comment
