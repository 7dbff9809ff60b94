from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash, verify_password
from app.models import Admin


async def get_admin(db: AsyncSession, id: int) -> Optional[Admin]:
    """
    Get an admin by ID.
    """
    result = await db.execute(select(Admin).filter(Admin.id == id))
    return result.scalars().first()


async def get_admin_by_email(db: AsyncSession, email: str) -> Optional[Admin]:
    """
    Get an admin by email.
    """
    result = await db.execute(select(Admin).filter(Admin.email == email.lower()))
    return result.scalars().first()


async def create_admin(db: AsyncSession, email: str, password: str, name: str) -> Admin:
    """
    Create a new admin account.
    """
    db_obj = Admin(
        email=email.lower(),
        hashed_password=get_password_hash(password),
        name=name,
    )
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def authenticate_admin(db: AsyncSession, email: str, password: str) -> Optional[Admin]:
    """
    Authenticate an admin by email and password.
    """
    admin = await get_admin_by_email(db, email=email)
    if not admin:
        return None
    if not verify_password(password, admin.hashed_password):
        return None
    return admin
