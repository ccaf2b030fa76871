"""Authentication service."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


async def get_user_by_phone(db: AsyncSession, phone_number: str) -> User | None:
    """Get user by phone number."""
    result = await db.execute(select(User).where(User.phone_number == phone_number))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def authenticate_user(db: AsyncSession, phone_number: str, password: str) -> User | None:
    """Authenticate user with phone and password."""
    user = await get_user_by_phone(db, phone_number)

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", phone_number)
        return None

    return user


async def create_user(
    db: AsyncSession,
    phone_number: str,
    password: str,
    first_name: str,
    last_name: str,
) -> User:
    """Create an administrator account."""
    user = User(
        phone_number=phone_number,
        password_hash=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
