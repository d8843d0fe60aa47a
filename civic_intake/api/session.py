from datetime import timedelta
from typing import Optional
from fastapi import Request, Response
from civic_intake.core.config import settings
from civic_intake.core.security import SessionClaims, decode_access_token

SESSION_COOKIE_NAME = "auth_token"


def _max_age_seconds() -> int:
    return int(timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS).total_seconds())


def store_session_cookie(response: Response, token: str) -> None:
    """Attach the session token to the response as an auth cookie"""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=_max_age_seconds(),
        path="/",
        # Not readable from page scripts
        httponly=True,
        # Browsers drop secure cookies on plain http, so only set it in production
        secure=settings.is_production,
        samesite="lax",
    )


def read_session_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE_NAME) or None


def clear_session_cookie(response: Response) -> None:
    """Remove the auth cookie (logout). There is no server-side session to drop."""
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def get_current_session(request: Request) -> Optional[SessionClaims]:
    """Claims from a valid session cookie, or None"""
    token = read_session_cookie(request)
    if token is None:
        return None
    return decode_access_token(token)
