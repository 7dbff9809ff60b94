from datetime import timedelta
from typing import Any
import traceback

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin
from app.core.config import settings
from app.core.logging import get_logger
from app.core.security import create_access_token
from app.crud.admin import authenticate_admin
from app.db.session import get_db
from app.models import Admin
from app.schemas import AdminLogin, Token, TokenVerification

logger = get_logger("app.auth")

router = APIRouter()


@router.post("/auth/login", response_model=Token)
async def login_access_token(
    credentials: AdminLogin,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Get an access token for an admin from login credentials.
    """
    try:
        logger.info(f"Login attempt: email={credentials.email}")
        admin = await authenticate_admin(db, email=credentials.email, password=credentials.password)

        if not admin:
            logger.warning(f"Login failed - incorrect credentials: email={credentials.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        token = create_access_token(
            subject=admin.id,
            expires_delta=access_token_expires,
            claims={"email": admin.email, "name": admin.name},
        )

        logger.info(f"Login successful: email={credentials.email}, admin_id={admin.id}")
        return {
            "message": "Login successful",
            "token": token,
            "token_type": "bearer",
            "admin": admin,
        }
    except HTTPException:
        raise
    except Exception as e:
        error_details = traceback.format_exc()
        logger.error(f"Login error: email={credentials.email}, error={str(e)}\n{error_details}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )


@router.get("/auth/verify", response_model=TokenVerification)
async def verify_token(
    current_admin: Admin = Depends(get_current_admin),
) -> Any:
    """
    Check a bearer token and return the admin it belongs to.
    """
    return {"valid": True, "admin": current_admin}
