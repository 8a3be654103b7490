from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from sqlmodel import Session
from database import get_session
from apps.auth.models import Profile

def get_current_user(request: Request, session: Session = Depends(get_session)) -> Optional[Profile]:
    user_id = request.session.get("user_id")
    if not user_id:
        return None

    user = session.get(Profile, user_id)
    if not user or not user.is_active:
        return None
    return user

def require_user(user: Optional[Profile] = Depends(get_current_user)) -> Profile:
    if not user:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            headers={"Location": "/auth/login"}
        )
    return user

def require_admin(user: Optional[Profile] = Depends(get_current_user)) -> Profile:
    if not user or not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            headers={"Location": "/"}
        )
    return user
