import pytest

from apps.catalog.models import MediaItem, MediaType, MediaView, Rating
from apps.catalog.schemas import DiscoverFilters, SortOption
from apps.catalog.services import CatalogService
from apps.core.bunny import embed_url_for
from apps.tracker.models import ActivityType, UserActivity
from config import settings
from conftest import make_genre, make_media, make_profile
from sqlmodel import select


@pytest.fixture
def service(session):
    return CatalogService(session)


def titles(cards):
    return [c.title for c in cards]


def test_search_matches_any_term_in_any_text_column(session, service):
    make_media(session, "The Matrix", description="A hacker learns the truth")
    make_media(session, "Amelie", original_title="Le Fabuleux Destin")
    make_media(session, "Heat", description="Cops and robbers")

    found = service.discover(DiscoverFilters(search="  MATRIX fabuleux ", sort=SortOption.OLDEST))
    assert sorted(titles(found)) == ["Amelie", "The Matrix"]

    found = service.discover(DiscoverFilters(search="robbers"))
    assert titles(found) == ["Heat"]


def test_type_filter(session, service):
    make_media(session, "Film", media_type=MediaType.MOVIE)
    make_media(session, "Series", media_type=MediaType.TV)

    assert titles(service.discover(DiscoverFilters(media_type="tv"))) == ["Series"]
    assert len(service.discover(DiscoverFilters(media_type="all"))) == 2


def test_unknown_type_is_rejected():
    with pytest.raises(ValueError):
        DiscoverFilters(media_type="podcast")


def test_genre_filter_matches_any_selected_genre(session, service):
    drama = make_genre(session, "Drama")
    comedy = make_genre(session, "Comedy")
    horror = make_genre(session, "Horror")
    make_media(session, "Sad", genres=[drama])
    make_media(session, "Funny", genres=[comedy])
    make_media(session, "Scary", genres=[horror])
    make_media(session, "Both", genres=[drama, comedy])

    found = service.discover(DiscoverFilters(genre_ids=[drama.id, comedy.id]))
    assert sorted(titles(found)) == ["Both", "Funny", "Sad"]


def test_year_range_is_inclusive(session, service):
    make_media(session, "Old", year=1950)
    make_media(session, "Edge", year=1990)
    make_media(session, "New", year=2010)

    found = service.discover(DiscoverFilters(year_from=1990, year_to=2010, sort=SortOption.OLDEST))
    assert titles(found) == ["Edge", "New"]


def test_min_rating_and_rating_sort(session, service):
    make_media(session, "Good", ratings=[4, 5])
    make_media(session, "Bad", ratings=[1, 2])
    make_media(session, "Unrated")

    assert titles(service.discover(DiscoverFilters(min_rating=2.5))) == ["Good"]
    assert titles(service.discover(DiscoverFilters())) == ["Good", "Bad", "Unrated"]


def test_views_sort(session, service):
    quiet = make_media(session, "Quiet")
    busy = make_media(session, "Busy")
    service.record_view(busy.id)
    service.record_view(busy.id)
    service.record_view(quiet.id)

    found = service.discover(DiscoverFilters(sort=SortOption.VIEWS))
    assert [(c.title, c.view_count) for c in found] == [("Busy", 2), ("Quiet", 1)]


def test_list_genres_uses_language(session, service):
    make_genre(session, "Drama", "Драма")
    make_genre(session, "Anime")

    assert [g.name for g in service.list_genres("ru")] == ["Anime", "Драма"]
    assert [g.name for g in service.list_genres("en")] == ["Anime", "Drama"]


def test_rate_upserts_one_row_per_user(session, service):
    user = make_profile(session)
    media = make_media(session, "Heat")

    service.rate(user, media.id, 3)
    service.rate(user, media.id, 5)

    rows = session.exec(select(Rating).where(Rating.media_id == media.id)).all()
    assert [r.rating for r in rows] == [5]

    activities = session.exec(select(UserActivity).where(UserActivity.user_id == user.id)).all()
    assert [a.activity_type for a in activities] == [ActivityType.RATING, ActivityType.RATING]
    assert activities[-1].value == "5"


@pytest.mark.parametrize("value", [0, 6])
def test_rate_rejects_out_of_range(session, service, value):
    user = make_profile(session)
    media = make_media(session, "Heat")
    with pytest.raises(ValueError):
        service.rate(user, media.id, value)


def test_blank_comment_is_ignored(session, service):
    user = make_profile(session)
    media = make_media(session, "Heat")

    assert service.add_comment(user, media.id, "   ") is None
    comment = service.add_comment(user, media.id, "  Great movie ")
    assert comment.content == "Great movie"


def test_media_detail_attaches_comment_authors_newest_first(session, service):
    alice = make_profile(session, "alice")
    bob = make_profile(session, "bob")
    media = make_media(session, "Heat", ratings=[2, 4])
    service.add_comment(alice, media.id, "first")
    service.add_comment(bob, media.id, "second")
    service.rate(alice, media.id, 5)

    detail = service.get_media_detail(media.id, user_id=alice.id)

    assert [(c.username, c.content) for c in detail.comments] == [("bob", "second"), ("alice", "first")]
    assert detail.user_rating == 5
    assert detail.user_status is None
    assert detail.average_rating == pytest.approx(11 / 3)


def test_media_detail_missing_returns_none(service):
    assert service.get_media_detail(404) is None


def test_record_view_logs_watch_for_known_user(session, service):
    user = make_profile(session)
    media = make_media(session, "Heat")

    service.record_view(media.id)
    service.record_view(media.id, user.id)

    assert len(session.exec(select(MediaView)).all()) == 2
    activities = session.exec(select(UserActivity)).all()
    assert [(a.user_id, a.activity_type) for a in activities] == [(user.id, ActivityType.WATCH)]


def test_latest_is_newest_first(session, service):
    make_media(session, "One")
    make_media(session, "Two")
    assert titles(service.latest(limit=1)) == ["Two"]


def test_embed_url_for(monkeypatch):
    monkeypatch.setattr(settings, "BUNNY_LIBRARY_ID", "")
    assert embed_url_for(None) == ""
    assert embed_url_for("/storage/media/videos/1-clip.mp4") == "/storage/media/videos/1-clip.mp4"

    monkeypatch.setattr(settings, "BUNNY_LIBRARY_ID", "42")
    assert embed_url_for("https://cdn.example.com/abc-123.mp4") == "https://iframe.mediadelivery.net/embed/42/abc-123"
    embedded = "https://iframe.mediadelivery.net/embed/7/guid"
    assert embed_url_for(embedded) == embedded


def test_stored_videos_are_not_rewritten_to_embeds(monkeypatch):
    monkeypatch.setattr(settings, "BUNNY_API_KEY", "")
    monkeypatch.setattr(settings, "BUNNY_LIBRARY_ID", "42")
    stored = "/storage/media/videos/1700000000000-clip.mp4"

    assert embed_url_for(stored) == stored


def test_search_treats_wildcards_literally(session, service):
    make_media(session, "100% Wolf")
    make_media(session, "1000 Wolves")
    make_media(session, "snake_case")
    make_media(session, "snakeXcase")

    assert titles(service.discover(DiscoverFilters(search="0%"))) == ["100% Wolf"]
    assert titles(service.discover(DiscoverFilters(search="e_c"))) == ["snake_case"]


def test_timestamps_are_timezone_aware(session, service):
    assert MediaItem(title="Heat").created_at.tzinfo is not None
    media = make_media(session, "Heat")
    user = make_profile(session, "bob")

    rating = service.rate(user, media.id, 3)
    first_update = rating.updated_at
    rating = service.rate(user, media.id, 5)

    assert Rating(media_id=media.id, user_id=user.id, rating=1).created_at.tzinfo is not None
    assert rating.rating == 5
    assert rating.updated_at >= first_update
