# fastfab/routers/session_router.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from ..application.services.session_service import SessionService
from ..config import Settings, get_settings
from ..cookies import REFRESH_COOKIE, clear_session_cookies, set_session_cookies
from ..dependencies import get_session_service
from ..exceptions import create_success_response
from ..schemas import MessageResponse, RefreshRequest, RefreshResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Session"])


def _refresh_token_from(request: Request, payload: Optional[RefreshRequest]) -> Optional[str]:
    token = request.cookies.get(REFRESH_COOKIE)
    if not token and payload is not None:
        token = payload.refreshToken
    return token


@router.post("/refresh", response_model=RefreshResponse)
def refresh(
    request: Request,
    response: Response,
    payload: Optional[RefreshRequest] = None,
    sessions: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    """Mint a new access token from a stored refresh token. The refresh token itself is not rotated."""
    issued = sessions.refresh_access_token(_refresh_token_from(request, payload))
    set_session_cookies(response, issued, settings)
    return RefreshResponse(message="Access token refreshed", accessToken=issued.access_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    payload: Optional[RefreshRequest] = None,
    sessions: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    token = _refresh_token_from(request, payload)
    if token:
        sessions.revoke(token)
    clear_session_cookies(response, settings)
    return create_success_response("Logged out successfully")
