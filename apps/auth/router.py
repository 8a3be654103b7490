import logging
from urllib.parse import urlencode
from fastapi import APIRouter, Depends, Form, Request, UploadFile, File
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlmodel import Session
from database import get_session
from config import settings
from apps.auth.services import AuthService
from apps.auth.models import Profile
from apps.auth.deps import require_user
from apps.auth.utils import oauth, auth0_configured
from apps.core.templating import templates
from apps.core.toast import toast, toast_error
from apps.tracker.services import TrackerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

def get_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(session)

def get_tracker_service(session: Session = Depends(get_session)) -> TrackerService:
    return TrackerService(session)

# --- AUTH0 ROUTES ---

@router.get("/login")
async def login(request: Request):
    if not auth0_configured():
        return HTMLResponse("Authentication service not configured", status_code=503)

    redirect_uri = request.url_for('auth_callback')
    return await oauth.auth0.authorize_redirect(request, redirect_uri)

@router.get("/callback", name="auth_callback")
async def auth_callback(request: Request, service: AuthService = Depends(get_service)):
    try:
        token = await oauth.auth0.authorize_access_token(request)
        user_info = token.get('userinfo')
        if not user_info:
            raise ValueError("No userinfo in token")
        user = service.get_or_create_from_userinfo(dict(user_info))
    except Exception:
        logger.exception("Login callback failed")
        toast_error(request, "Login failed")
        return RedirectResponse(url="/", status_code=303)

    request.session['user_id'] = user.id
    toast(request, f"Welcome, {user.username}")
    return RedirectResponse(url="/discover", status_code=303)

@router.get("/logout")
def logout(request: Request):
    request.session.clear()

    if not auth0_configured():
        return RedirectResponse(url="/", status_code=303)

    # Auth0 clears its own session, then sends the browser back here
    query = urlencode({"client_id": settings.AUTH0_CLIENT_ID, "returnTo": str(request.base_url)})
    return RedirectResponse(url=f"https://{settings.AUTH0_DOMAIN}/v2/logout?{query}")

# --- PROFILE ROUTES ---

@router.get("/profile", response_class=HTMLResponse)
def profile(
    request: Request,
    user: Profile = Depends(require_user),
    tracker: TrackerService = Depends(get_tracker_service)
):
    watchlist = tracker.get_watchlist(user.id)
    activities = tracker.get_recent_activity(user.id)
    return templates.TemplateResponse(request, "auth/profile.html", {
        "user": user,
        "watchlist": watchlist,
        "activities": activities
    })

@router.post("/profile")
def update_profile(
    request: Request,
    username: str = Form(default=None),
    avatar: UploadFile = File(default=None),
    service: AuthService = Depends(get_service),
    user: Profile = Depends(require_user)
):
    try:
        service.update_profile(user, username, avatar)
        toast(request, "Profile updated")
    except Exception:
        logger.exception("Error updating profile %s", user.id)
        toast_error(request, "Failed to update profile")

    return RedirectResponse(url="/auth/profile", status_code=303)
