from apps.admin.forms import build_people, validate_media_form
from apps.catalog.models import MediaType
from config import settings
from conftest import make_upload


def valid_values(**overrides):
    values = {
        "title": "Heat",
        "original_title": "",
        "media_type": "movie",
        "description": "Cops and robbers",
        "year": "1995",
        "duration": "170",
        "genre_ids": [1],
        "poster": make_upload("poster.jpg"),
        "video": make_upload("heat.mp4", content_type="video/mp4"),
        "actors": [{"name": "Al Pacino", "character": "Hanna", "photo": None}],
        "directors": [{"name": "Michael Mann", "photo": None}],
    }
    values.update(overrides)
    return values


def test_valid_form():
    form, errors = validate_media_form(valid_values())
    assert errors == {}
    assert form.title == "Heat"
    assert form.original_title is None
    assert form.media_type == MediaType.MOVIE
    assert form.year == 1995
    assert form.duration == 170
    assert form.actors[0].character == "Hanna"


def test_missing_poster_is_a_validation_error():
    form, errors = validate_media_form(valid_values(poster=None))
    assert form is None
    assert errors == {"poster": "Poster is required"}


def test_empty_file_part_counts_as_missing():
    _, errors = validate_media_form(valid_values(video=make_upload("", content=b"")))
    assert errors == {"video": "Video is required"}


def test_uploads_are_optional_on_update():
    form, errors = validate_media_form(valid_values(poster=None, video=None), is_update=True)
    assert errors == {}
    assert form.poster is None and form.video is None


def test_all_field_errors_are_reported_together():
    _, errors = validate_media_form(valid_values(
        title=" ", description="", duration="", genre_ids=[], poster=None
    ))
    assert errors == {
        "title": "Title is required",
        "description": "Description is required",
        "duration": "Duration is required",
        "genre_ids": "Select at least one genre",
        "poster": "Poster is required",
    }


def test_year_bounds():
    _, errors = validate_media_form(valid_values(year="1899"))
    assert "year" in errors
    _, errors = validate_media_form(valid_values(year=str(settings.max_year + 1)))
    assert "year" in errors
    _, errors = validate_media_form(valid_values(year=str(settings.max_year)))
    assert errors == {}


def test_unknown_media_type():
    _, errors = validate_media_form(valid_values(media_type="podcast"))
    assert "media_type" in errors


def test_upload_content_types_are_checked():
    _, errors = validate_media_form(valid_values(poster=make_upload("poster.txt", content_type="text/plain")))
    assert errors == {"poster": "Poster must be an image"}

    _, errors = validate_media_form(valid_values(video=make_upload("clip.jpg")))
    assert errors == {"video": "Video must be a video file"}


def test_blank_people_rows_are_skipped():
    form, errors = validate_media_form(valid_values(
        actors=[{"name": " ", "character": "", "photo": None}, {"name": "Val Kilmer", "character": " Chris ", "photo": None}],
        directors=[{"name": "", "photo": make_upload("")}],
    ))
    assert errors == {}
    assert [(a.name, a.character) for a in form.actors] == [("Val Kilmer", "Chris")]
    assert form.directors == []


def test_person_photo_must_be_an_image():
    _, errors = validate_media_form(valid_values(
        directors=[{"name": "Michael Mann", "photo": make_upload("mann.pdf", content_type="application/pdf")}]
    ))
    assert errors == {"directors": "Photo for Michael Mann must be an image"}


def test_duplicate_genres_are_collapsed():
    form, _ = validate_media_form(valid_values(genre_ids=[3, 1, 3]))
    assert form.genre_ids == [3, 1]


def test_build_people_zips_repeated_fields():
    photo = make_upload("a.jpg")
    people = build_people(["A", "B"], [photo], ["Hero"])
    assert people == [
        {"name": "A", "character": "Hero", "photo": photo},
        {"name": "B", "character": None, "photo": None},
    ]
    assert build_people(["D"], []) == [{"name": "D", "photo": None}]
