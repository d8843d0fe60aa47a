from typing import Iterator, Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from civic_intake.api.session import get_current_session
from civic_intake.core.database import Database
from civic_intake.core.errors import AuthenticationError
from civic_intake.core.policy import Action, Grant, scope_for
from civic_intake.core.security import SessionClaims


def get_database(request: Request) -> Database:
    """Database handle created by the application lifespan"""
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Iterator[Session]:
    """
    Dependency for getting database session.

    The session is closed after the request completes, uncommitted work is
    rolled back.
    """
    yield from database.session()


async def require_session(
    claims: Optional[SessionClaims] = Depends(get_current_session),
) -> SessionClaims:
    """
    Require a valid session cookie.

    Every protected endpoint goes through this (directly or via
    require_permission). Raises 401 when the cookie is missing, expired or
    tampered with.
    """
    if claims is None:
        raise AuthenticationError()
    return claims


def require_permission(action: Action):
    """
    Build a dependency that checks the caller's role against the policy table.

    Returns the Grant (including scope) so handlers can narrow queries. A role
    without the action is rejected the same way as a missing session.
    """
    async def dependency(claims: Optional[SessionClaims] = Depends(get_current_session)) -> Grant:
        scope = scope_for(claims.role, action) if claims is not None else None
        if scope is None:
            raise AuthenticationError()
        return Grant(user_id=claims.user_id, role=claims.role, action=action, scope=scope)

    return dependency
