"""
Bearer-token guards for client and admin routes.

Both resolve the token through the identity service. The admin guard also
requires the resolved email to be exactly the configured admin email.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, Request

from config import Settings
from deps import get_identity, get_settings
from errors import Forbidden, InternalError, ShopError, Unauthorized
from identity import Identity, IdentityClient

logger = logging.getLogger(__name__)


def bearer_token(authorization: Optional[str] = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("Unauthorized: token missing or malformed")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise Unauthorized("Unauthorized: token not found")
    return token


def resolve_identity(token: str, identity: IdentityClient) -> Identity:
    try:
        user = identity.get_user(token)
    except (ShopError, ValueError):
        logger.exception("Token resolution failed")
        raise InternalError("Internal authentication server error")
    if user is None:
        raise Unauthorized("Unauthorized: invalid token")
    return user


def require_client(
    request: Request,
    token: str = Depends(bearer_token),
    identity: IdentityClient = Depends(get_identity),
) -> Identity:
    user = resolve_identity(token, identity)
    request.state.user = user
    return user


def require_admin(
    request: Request,
    token: str = Depends(bearer_token),
    identity: IdentityClient = Depends(get_identity),
    settings: Settings = Depends(get_settings),
) -> Identity:
    user = resolve_identity(token, identity)
    if not settings.admin_email or user.email != settings.admin_email:
        logger.warning("Admin access refused for %s", user.email)
        raise Forbidden("Unauthorized: access denied")
    request.state.user = user
    return user
