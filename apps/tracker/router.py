import logging
from fastapi import APIRouter, Depends, Request, Form, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlmodel import Session
from database import get_session
from apps.auth.deps import require_user
from apps.auth.models import Profile
from apps.core.templating import templates
from apps.core.toast import toast, toast_error
from apps.tracker.models import WatchStatus
from apps.tracker.services import TrackerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tracker", tags=["tracker"])

def get_service(session: Session = Depends(get_session)) -> TrackerService:
    return TrackerService(session)

@router.get("/", response_class=HTMLResponse)
def watchlist(
    request: Request,
    user: Profile = Depends(require_user),
    service: TrackerService = Depends(get_service)
):
    return templates.TemplateResponse(request, "tracker/watchlist.html", {
        "user": user,
        "watchlist": service.get_watchlist(user.id)
    })

@router.post("/status/{media_id}")
def update_status(
    request: Request,
    media_id: int,
    status: str = Form(...),
    user: Profile = Depends(require_user),
    service: TrackerService = Depends(get_service)
):
    redirect = RedirectResponse(url=f"/watch/{media_id}", status_code=303)
    try:
        if status == "none":
            service.remove_user_media(user.id, media_id)
            toast(request, "Removed from your list")
        else:
            service.update_status(user.id, media_id, WatchStatus(status))
            toast(request, "Status updated")
    except Exception:
        logger.exception("Error updating status of media %s", media_id)
        toast_error(request, "Failed to update status")
    return redirect

@router.delete("/status/{media_id}")
def remove_status(
    media_id: int,
    user: Profile = Depends(require_user),
    service: TrackerService = Depends(get_service)
):
    if service.remove_user_media(user.id, media_id):
        return Response(status_code=204)
    return Response(status_code=404)
