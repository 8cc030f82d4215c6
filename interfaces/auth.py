import logging

from fastapi import Cookie, Depends, Header, HTTPException, Request

from application.task_list import TaskCollectionView
from domain.entities import Viewer
from infrastructure.auth import AuthClient, AuthError

logger = logging.getLogger(__name__)

COOKIE_NAME = "access_token"


def extract_token(access_token: str | None, authorization: str | None) -> str | None:
    if authorization and authorization.startswith("Bearer "):
        logger.debug("Token extracted from Authorization header")
        return authorization.split("Bearer ")[1]
    if access_token:
        logger.debug("Token extracted from cookie")
        return access_token
    return None


async def get_optional_viewer(
    request: Request,
    access_token: str | None = Cookie(default=None),
    authorization: str | None = Header(default=None),
) -> Viewer | None:
    """Resolves the viewer from the request, or None when not signed in."""
    token = extract_token(access_token, authorization)
    if not token:
        return None
    auth: AuthClient = request.app.state.auth
    try:
        claims = auth.verify_token(token)
    except AuthError:
        return None
    is_admin = await auth.is_admin(claims["sub"], token)
    return Viewer(
        user_id=claims["sub"],
        is_admin=is_admin,
        email=claims.get("email"),
        access_token=token,
        expires_at=claims.get("exp"),
    )


async def get_current_viewer(viewer: Viewer | None = Depends(get_optional_viewer)) -> Viewer:
    if viewer is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return viewer


async def get_task_list(request: Request, viewer: Viewer = Depends(get_current_viewer)) -> TaskCollectionView:
    return await request.app.state.sessions.open(viewer)


def close_session(request: Request, token: str | None) -> None:
    """Drops the session of the token's user. Unverifiable tokens are left to expiry eviction."""
    if not token:
        return
    try:
        claims = request.app.state.auth.verify_token(token)
    except AuthError as e:
        logger.debug(f"Logout with an unverifiable token: {e}")
        return
    request.app.state.sessions.close(claims["sub"])
