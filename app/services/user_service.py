"""
User service — author profiles.

Profiles exist so the single-article read can join author details
(``name``, ``email``, ``pfp``).  Credentials are not stored here; identity is
established upstream and handed over as a user id.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User
from app.schemas import UserCreate


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "pfp": user.pfp,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def get_user(db: AsyncSession, user_id: int) -> dict | None:
    """Return the profile for *user_id*, or None when it does not exist."""
    user = await db.get(User, user_id)
    return _user_to_dict(user) if user is not None else None


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    """
    Create an author profile.

    Email uniqueness is enforced by the database; the router translates the
    resulting ``IntegrityError`` into a 409.
    """
    user = User(name=data.name, email=data.email, pfp=data.pfp)
    db.add(user)
    await db.flush()
    return _user_to_dict(user)
