from typing import Dict, List
from fastapi import Request

SESSION_KEY = "toasts"

def toast(request: Request, message: str, level: str = "success") -> None:
    """Queue a message for the next rendered page."""
    toasts = request.session.get(SESSION_KEY, [])
    toasts.append({"level": level, "message": message})
    request.session[SESSION_KEY] = toasts

def toast_error(request: Request, message: str) -> None:
    toast(request, message, level="error")

def pop_toasts(request: Request) -> List[Dict[str, str]]:
    return request.session.pop(SESSION_KEY, [])
