import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Request, Form, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlmodel import Session
from config import settings
from database import get_session
from apps.auth.deps import get_current_user
from apps.auth.models import Profile
from apps.catalog.schemas import DiscoverFilters
from apps.catalog.services import CatalogService
from apps.core.templating import templates
from apps.core.toast import toast, toast_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])

def get_service(session: Session = Depends(get_session)) -> CatalogService:
    return CatalogService(session)

def get_language(lang: Optional[str] = Query(None)) -> str:
    return lang if lang in ("en", "ru") else settings.DEFAULT_LANGUAGE

@router.get("/", response_class=HTMLResponse)
def home(
    request: Request,
    language: str = Depends(get_language),
    user: Optional[Profile] = Depends(get_current_user),
    service: CatalogService = Depends(get_service)
):
    return templates.TemplateResponse(request, "catalog/home.html", {
        "user": user,
        "latest": service.latest(language=language)
    })

def parse_filters(values: Dict[str, Any]) -> DiscoverFilters:
    """Builds the filters, dropping each field that fails validation."""
    try:
        return DiscoverFilters(**values)
    except ValidationError as exc:
        invalid = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        logger.info("Ignoring invalid discover filters %s", sorted(invalid))
        return DiscoverFilters(**{k: v for k, v in values.items() if k not in invalid})

@router.get("/discover", response_class=HTMLResponse)
def discover(
    request: Request,
    search: str = "",
    media_type: str = Query("all", alias="type"),
    genre: List[str] = Query(default=[]),
    year_from: Optional[str] = None,
    year_to: Optional[str] = None,
    rating: Optional[str] = None,
    sort: str = "rating",
    language: str = Depends(get_language),
    user: Optional[Profile] = Depends(get_current_user),
    service: CatalogService = Depends(get_service)
):
    values: Dict[str, Any] = {
        "search": search,
        "media_type": media_type,
        "sort": sort,
        "language": language,
    }
    # Empty inputs mean "no filter"
    submitted = {"genre_ids": [g for g in genre if g.strip()], "year_from": year_from, "year_to": year_to, "min_rating": rating}
    values.update({k: v for k, v in submitted.items() if v not in (None, "", [])})
    filters = parse_filters(values)

    try:
        media = service.discover(filters)
    except Exception:
        logger.exception("Error fetching media")
        media = []

    return templates.TemplateResponse(request, "catalog/discover.html", {
        "user": user,
        "filters": filters,
        "genres": service.list_genres(language),
        "media": media,
        "min_year": settings.min_year,
        "max_year": settings.max_year
    })

@router.get("/watch/{media_id}", response_class=HTMLResponse)
def watch(
    request: Request,
    media_id: int,
    language: str = Depends(get_language),
    user: Optional[Profile] = Depends(get_current_user),
    service: CatalogService = Depends(get_service)
):
    user_id = user.id if user else None
    media = service.get_media_detail(media_id, user_id, language)
    if not media:
        return templates.TemplateResponse(request, "catalog/not_found.html", {"user": user}, status_code=404)

    try:
        service.record_view(media_id, user_id)
        media.view_count += 1
    except Exception:
        logger.exception("Error recording view for media %s", media_id)

    return templates.TemplateResponse(request, "catalog/watch.html", {
        "user": user,
        "media": media
    })

@router.post("/watch/{media_id}/rate")
def rate(
    request: Request,
    media_id: int,
    rating: int = Form(...),
    user: Optional[Profile] = Depends(get_current_user),
    service: CatalogService = Depends(get_service)
):
    redirect = RedirectResponse(url=f"/watch/{media_id}", status_code=303)
    if not user:
        toast_error(request, "Please log in to rate")
        return redirect

    try:
        service.rate(user, media_id, rating)
        toast(request, "Rating saved")
    except Exception:
        logger.exception("Error rating media %s", media_id)
        toast_error(request, "Failed to save rating")
    return redirect

@router.post("/watch/{media_id}/comments")
def add_comment(
    request: Request,
    media_id: int,
    content: str = Form(""),
    user: Optional[Profile] = Depends(get_current_user),
    service: CatalogService = Depends(get_service)
):
    redirect = RedirectResponse(url=f"/watch/{media_id}#comments", status_code=303)
    if not content.strip():
        return redirect
    if not user:
        toast_error(request, "Please log in to comment")
        return redirect

    try:
        service.add_comment(user, media_id, content)
        toast(request, "Comment added")
    except Exception:
        logger.exception("Error adding comment to media %s", media_id)
        toast_error(request, "Failed to add comment")
    return redirect
