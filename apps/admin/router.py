import logging
from typing import List, Optional, Dict, Any
from fastapi import APIRouter, Depends, Request, Form, File, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlmodel import Session
from config import settings
from database import get_session
from apps.auth.deps import require_admin
from apps.auth.models import Profile
from apps.admin.forms import build_people, validate_media_form
from apps.admin.services import AdminService, MediaAuthoringService
from apps.catalog.services import CatalogService
from apps.core.templating import templates
from apps.core.toast import toast, toast_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

def get_service(session: Session = Depends(get_session)) -> AdminService:
    return AdminService(session)

def get_authoring_service(session: Session = Depends(get_session)) -> MediaAuthoringService:
    return MediaAuthoringService(session)

def blank_form_values() -> Dict[str, Any]:
    return {
        "title": "",
        "original_title": "",
        "media_type": "movie",
        "description": "",
        "year": settings.max_year,
        "duration": "",
        "genre_ids": [],
        "actors": [{"name": "", "character": ""}],
        "directors": [{"name": ""}],
    }

def render_form(request: Request, user: Profile, session: Session, values: Dict[str, Any],
                errors: Optional[Dict[str, str]] = None, media_id: Optional[int] = None,
                status_code: int = 200):
    genres = CatalogService(session).list_genres(settings.DEFAULT_LANGUAGE)
    return templates.TemplateResponse(request, "admin/media_form.html", {
        "user": user,
        "genres": genres,
        "values": values,
        "errors": errors or {},
        "media_id": media_id
    }, status_code=status_code)

async def submitted_values(
    title: str = Form(""),
    original_title: str = Form(""),
    media_type: str = Form("movie"),
    description: str = Form(""),
    year: str = Form(""),
    duration: str = Form(""),
    genre: List[int] = Form(default=[]),
    poster: Optional[UploadFile] = File(default=None),
    video: Optional[UploadFile] = File(default=None),
    actor_name: List[str] = Form(default=[]),
    actor_character: List[str] = Form(default=[]),
    actor_photo: List[UploadFile] = File(default=[]),
    director_name: List[str] = Form(default=[]),
    director_photo: List[UploadFile] = File(default=[]),
) -> Dict[str, Any]:
    return {
        "title": title,
        "original_title": original_title,
        "media_type": media_type,
        "description": description,
        "year": year,
        "duration": duration,
        "genre_ids": genre,
        "poster": poster,
        "video": video,
        "actors": build_people(actor_name, actor_photo, actor_character),
        "directors": build_people(director_name, director_photo),
    }

def redisplay_values(values: Dict[str, Any]) -> Dict[str, Any]:
    """Submitted values without the file parts, for re-rendering the form."""
    shown = {k: v for k, v in values.items() if k not in ("poster", "video")}
    shown["actors"] = [{"name": a["name"], "character": a.get("character") or ""} for a in values["actors"]]
    shown["directors"] = [{"name": d["name"]} for d in values["directors"]]
    return shown

# --- DASHBOARD ---

@router.get("/", response_class=HTMLResponse)
def dashboard(
    request: Request,
    user: Profile = Depends(require_admin),
    service: AdminService = Depends(get_service)
):
    try:
        users = service.list_users()
        media_items = service.list_media()
        stats = service.get_stats()
    except Exception:
        logger.exception("Error fetching admin data")
        toast_error(request, "Failed to fetch data")
        users, media_items, stats = [], [], {"total_users": 0, "total_media": 0, "admin_users": 0}

    return templates.TemplateResponse(request, "admin/dashboard.html", {
        "user": user,
        "users": users,
        "media_items": media_items,
        "stats": stats
    })

@router.post("/users/{user_id}/admin")
def toggle_user_admin(
    request: Request,
    user_id: int,
    is_admin: bool = Form(...),
    user: Profile = Depends(require_admin),
    service: AdminService = Depends(get_service)
):
    try:
        service.set_admin(user_id, is_admin)
        toast(request, "User updated successfully")
    except Exception:
        logger.exception("Error updating user %s", user_id)
        toast_error(request, "Failed to update user")
    return RedirectResponse(url="/admin/", status_code=303)

# --- MEDIA AUTHORING ---

@router.get("/media/new", response_class=HTMLResponse)
def new_media_form(
    request: Request,
    user: Profile = Depends(require_admin),
    session: Session = Depends(get_session)
):
    return render_form(request, user, session, blank_form_values())

@router.post("/media", response_class=HTMLResponse)
async def create_media(
    request: Request,
    values: Dict[str, Any] = Depends(submitted_values),
    user: Profile = Depends(require_admin),
    service: MediaAuthoringService = Depends(get_authoring_service)
):
    form, errors = validate_media_form(values)
    if errors:
        return render_form(request, user, service.session, redisplay_values(values), errors, status_code=400)

    try:
        media = await service.create_media(form)
    except Exception:
        logger.exception("Error adding media")
        service.session.rollback()
        toast_error(request, "Failed to add media")
        return render_form(request, user, service.session, redisplay_values(values), status_code=500)
    finally:
        await service.close()

    toast(request, "Media added successfully")
    logger.info("Admin %s added media %s", user.id, media.id)
    return RedirectResponse(url="/admin/", status_code=303)

@router.get("/media/{media_id}/edit", response_class=HTMLResponse)
def edit_media_form(
    request: Request,
    media_id: int,
    user: Profile = Depends(require_admin),
    service: MediaAuthoringService = Depends(get_authoring_service)
):
    media = service.get_media(media_id)
    if not media:
        toast_error(request, "Media not found")
        return RedirectResponse(url="/admin/", status_code=303)

    return render_form(request, user, service.session, service.form_values(media), media_id=media_id)

@router.post("/media/{media_id}", response_class=HTMLResponse)
async def update_media(
    request: Request,
    media_id: int,
    values: Dict[str, Any] = Depends(submitted_values),
    user: Profile = Depends(require_admin),
    service: MediaAuthoringService = Depends(get_authoring_service)
):
    form, errors = validate_media_form(values, is_update=True)
    if errors:
        return render_form(request, user, service.session, redisplay_values(values), errors,
                           media_id=media_id, status_code=400)

    try:
        await service.update_media(media_id, form)
    except Exception:
        logger.exception("Error updating media %s", media_id)
        service.session.rollback()
        toast_error(request, "Failed to update media")
        return render_form(request, user, service.session, redisplay_values(values),
                           media_id=media_id, status_code=500)
    finally:
        await service.close()

    toast(request, "Media updated successfully")
    return RedirectResponse(url="/admin/", status_code=303)

@router.post("/media/{media_id}/delete")
def delete_media(
    request: Request,
    media_id: int,
    user: Profile = Depends(require_admin),
    service: AdminService = Depends(get_service)
):
    try:
        if service.delete_media(media_id):
            toast(request, "Media deleted")
        else:
            toast_error(request, "Media not found")
    except Exception:
        logger.exception("Error deleting media %s", media_id)
        toast_error(request, "Failed to delete media")
    return RedirectResponse(url="/admin/", status_code=303)
