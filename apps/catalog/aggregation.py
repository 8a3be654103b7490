"""
Re-aggregation of joined catalog rows into the shapes the pages render.

The ORM loads a media item together with its genres, people, ratings and
views; these helpers fold those lists into a single `MediaCard` and apply
the filters that can only run after aggregation (minimum rating, sorting).
"""
from typing import Iterable, List, Optional, Tuple
from apps.catalog.models import MediaItem, MediaPerson, PersonRole, Rating
from apps.catalog.schemas import CastMember, GenreView, MediaCard, SortOption

def average_rating(ratings: Iterable[Rating]) -> float:
    """Arithmetic mean of the rating values, 0 for an empty list."""
    values = [r.rating or 0 for r in ratings]
    if not values:
        return 0
    return sum(values) / len(values)

def split_cast(media_persons: Iterable[MediaPerson]) -> Tuple[List[CastMember], List[CastMember]]:
    actors, directors = [], []
    for mp in media_persons:
        if not mp.person:
            continue
        member = CastMember(
            person_id=mp.person.id,
            name=mp.person.name,
            photo_url=mp.person.photo_url,
        )
        if mp.role == PersonRole.ACTOR:
            member.character = mp.character_name
            actors.append(member)
        elif mp.role == PersonRole.DIRECTOR:
            directors.append(member)
    return actors, directors

def build_card(item: MediaItem, language: str = "en") -> MediaCard:
    actors, directors = split_cast(item.media_persons)
    return MediaCard(
        id=item.id,
        title=item.title,
        original_title=item.original_title,
        media_type=item.media_type,
        year=item.year,
        duration=item.duration,
        poster_url=item.poster_url,
        genres=[GenreView(id=g.id, name=g.display_name(language)) for g in item.genres],
        average_rating=average_rating(item.ratings),
        rating_count=len(item.ratings),
        view_count=len(item.views),
        actors=actors,
        directors=directors,
    )

def _sort_key(sort: SortOption):
    if sort == SortOption.VIEWS:
        return lambda c: -c.view_count
    if sort == SortOption.NEWEST:
        return lambda c: -(c.year or 0)
    if sort == SortOption.OLDEST:
        return lambda c: c.year or 0
    return lambda c: -c.average_rating

def filter_and_sort(cards: List[MediaCard], min_rating: float = 0,
                    sort: Optional[SortOption] = SortOption.RATING) -> List[MediaCard]:
    kept = [c for c in cards if c.average_rating >= min_rating]
    if sort is None:
        return kept
    # sorted() is stable, ties keep query order
    return sorted(kept, key=_sort_key(SortOption(sort)))
