"""
Minimal user records referenced by court submissions.

Authentication lives outside this service; these helpers only maintain the
rows that ``courts.submitted_by`` points at.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from court_directory.database.models import User

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(session: AsyncSession, email: str, is_admin: Optional[bool] = None) -> int:
    """
    Create a user row.

    Args:
        session: Database session
        email: User email, stored lowercased
        is_admin: Optional admin flag

    Returns:
        ID of the created user

    Raises:
        ValueError: If the email is empty or already registered
    """
    normalized = _normalize_email(email)
    if not normalized:
        raise ValueError("Email is required")

    result = await session.execute(select(User.id).where(User.email == normalized))
    if result.scalar_one_or_none():
        raise ValueError(f"Email {normalized} is already registered")

    user = User(email=normalized, is_admin=is_admin)
    session.add(user)
    await session.flush()
    user_id = user.id
    await session.commit()

    logger.info("Created user %s", user_id)
    return user_id


async def get_user(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """Return a user dict, or None if no such user exists."""
    user = await session.get(User, user_id)
    if user is None:
        return None
    return {"id": user.id, "email": user.email, "is_admin": user.is_admin}
