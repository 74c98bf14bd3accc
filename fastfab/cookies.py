from fastapi import Response

from .config import Settings
from .application.services.session_service import IssuedSession

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _cookie_options(settings: Settings) -> dict:
    return {
        "httponly": True,
        "secure": settings.secure_cookies,
        "samesite": "lax",
        "path": "/",
    }


def set_session_cookies(response: Response, session: IssuedSession, settings: Settings) -> None:
    options = _cookie_options(settings)
    response.set_cookie(ACCESS_COOKIE, session.access_token, max_age=session.access_max_age, **options)
    if session.refresh_token:
        response.set_cookie(REFRESH_COOKIE, session.refresh_token, max_age=session.refresh_max_age, **options)


def clear_session_cookies(response: Response, settings: Settings) -> None:
    options = _cookie_options(settings)
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
