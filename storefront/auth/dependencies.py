import uuid
from typing import Annotated

from fastapi import Cookie, Depends
from sqlalchemy.orm import Session

from storefront.auth.models.user import ROLE_ADMIN, User
from storefront.core import security
from storefront.core.exceptions import ForbiddenError, UnauthorizedError
from storefront.db.session import get_db


async def get_access_token_from_cookie(
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """Extract the access token from its cookie"""
    if not access_token:
        raise UnauthorizedError("Not authenticated")
    return access_token


async def get_current_user(
    access_token: str = Depends(get_access_token_from_cookie),
    db: Session = Depends(get_db),
) -> User:
    """Get current authenticated user from access token"""
    payload = security.decode_token(access_token)
    if payload is None or payload.get("type") != "access":
        raise UnauthorizedError("Could not validate credentials")

    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise UnauthorizedError("Could not validate credentials")

    user = db.get(User, _parse_uuid(user_id))
    if user is None:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise ForbiddenError("Account is inactive")

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != ROLE_ADMIN:
        raise ForbiddenError("Administrator privileges required")
    return current_user


def _parse_uuid(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError as exc:
        raise UnauthorizedError("Could not validate credentials") from exc
