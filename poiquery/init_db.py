"""
Database Initialization
=======================

First-time setup without Alembic: create (optionally drop) every table
and optionally seed an admin account, since POIs can only be written
by admins and registration alone does not create one on a fresh install.

Production deployments should run ``alembic upgrade head`` instead.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from poiquery.core.exceptions import ValidationException
from poiquery.models import Base, User, UserRole
from poiquery.schemas.auth import RegisterRequest
from poiquery.services.database import build_session_factory, get_engine
from poiquery.services.users import UserService

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create every table registered on Base.metadata that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("All tables created")


async def drop_all_tables(engine: AsyncEngine) -> None:
    """
    Drop every table.

    WARNING: This deletes ALL data.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("All tables dropped!")


async def seed_admin(
    session_factory: async_sessionmaker[AsyncSession],
    email: str,
    password: str,
) -> Optional[User]:
    """
    Create an admin account unless the email is already registered.

    Returns:
        The new admin, or None when the email was taken.
    """
    request = RegisterRequest(email=email, password=password, role=UserRole.ADMIN)
    async with session_factory() as session:
        try:
            user, _ = await UserService(session).register(request)
        except ValidationException as e:
            logger.warning(f"Admin not created: {e.message}")
            return None
    logger.info(f"Admin account {user.email} created")
    return user


async def init_database(
    drop_existing: bool = False,
    admin_email: Optional[str] = None,
    admin_password: Optional[str] = None,
    engine: Optional[AsyncEngine] = None,
) -> None:
    """
    Initialize the database.

    Args:
        drop_existing: Drop all tables first. DANGER: deletes all data!
        admin_email: Seed an admin with this email.
        admin_password: Password for the seeded admin.
        engine: Engine to use; defaults to the configured one.
    """
    engine = engine or get_engine()
    logger.info("Starting database initialization...")

    if drop_existing:
        logger.warning("Dropping existing tables...")
        await drop_all_tables(engine)

    await create_all_tables(engine)

    if admin_email and admin_password:
        await seed_admin(build_session_factory(engine), admin_email, admin_password)

    logger.info("Database initialization complete!")
