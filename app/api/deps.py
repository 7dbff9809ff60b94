from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.core.security import decode_access_token
from app.crud.admin import get_admin
from app.db.session import get_db
from app.models import Admin

logger = get_logger("app.auth")

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_admin_from_token(db: AsyncSession, token: str) -> Admin:
    """
    Resolve a bearer token to the admin it was issued for.
    """
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")
    try:
        admin_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid or expired token")

    admin = await get_admin(db, id=admin_id)
    if admin is None:
        logger.warning(f"Token for unknown admin: admin_id={admin_id}")
        raise _unauthorized("Invalid or expired token")
    return admin


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Not authenticated")
    return await get_admin_from_token(db, credentials.credentials)
