"""
Database bootstrap.

Creates the tables, repairs legacy request statuses and seeds the first
admin account. Runs on application startup and as
``python -m app.db.init_db``.
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.core.config import settings
from app.core.logging import logger
from app.core.security import PasswordManager
from app.db.session import AsyncSessionLocal, engine
from app.models import Base, User, UserRole
from app.services.amount_request import AmountRequestService


async def create_tables(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables are in place")


async def seed_admin(db: AsyncSession) -> bool:
    """
    Create the configured admin account unless an admin already exists.

    Nothing happens when no admin password is configured.

    Returns:
        True if an account was created
    """
    seed = settings.admin_seed
    if not seed.password_str:
        logger.debug("ADMIN_PASSWORD not set; skipping admin seed")
        return False

    existing = (await db.execute(
        select(User.id).where(User.role == UserRole.ADMIN.value).limit(1)
    )).scalar()
    if existing is not None:
        return False

    db.add(User(
        username=seed.username,
        hashed_password=PasswordManager.get_password_hash(seed.password_str),
        full_name=seed.full_name,
        email=seed.email,
        role=UserRole.ADMIN.value,
    ))
    await db.commit()
    logger.info(f"Seeded admin account '{seed.username}'")
    return True


async def init_db() -> None:
    await create_tables()
    async with AsyncSessionLocal() as db:
        await AmountRequestService.normalize_legacy_statuses(db)
        await seed_admin(db)


if __name__ == "__main__":
    asyncio.run(init_db())
