"""CLI commands for management tasks."""

import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base, async_session_maker, engine
from app.core.logging import configure_logging
from app.models.user import User
from app.schemas.validators import validate_phone_number
from app.services.auth import create_user, get_user_by_phone

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A management command could not complete."""


async def create_admin(
    db: AsyncSession,
    phone_number: str,
    password: str,
    first_name: str,
    last_name: str,
) -> User:
    """Create an administrator account."""
    try:
        phone_number = validate_phone_number(phone_number)
    except ValueError as exc:
        raise CommandError(str(exc)) from None

    if len(password) < 6:
        raise CommandError("Password must be at least 6 characters")

    if await get_user_by_phone(db, phone_number):
        raise CommandError(f"Phone number {phone_number} is already registered!")

    user = await create_user(db, phone_number, password, first_name, last_name)
    logger.info("Created admin user %s", user.id)
    return user


async def init_db() -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✓ Database tables created")


async def _create_admin(phone_number: str, password: str, first_name: str, last_name: str) -> None:
    async with async_session_maker() as db:
        user = await create_admin(db, phone_number, password, first_name, last_name)

    print("✓ Admin created successfully!")
    print(f"  ID: {user.id}")
    print(f"  Name: {user.full_name}")
    print(f"  Phone: {user.phone_number}")


def main() -> None:
    """CLI entry point."""
    configure_logging()

    if len(sys.argv) < 2:
        print("Usage: python -m app.cli <command>")
        print("Commands:")
        print("  init-db")
        print("  create-admin <phone> <password> <first_name> <last_name>")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_db())
    elif command == "create-admin":
        if len(sys.argv) != 6:
            print("Usage: python -m app.cli create-admin <phone> <password> <first_name> <last_name>")
            sys.exit(1)

        _, _, phone, password, first_name, last_name = sys.argv
        try:
            asyncio.run(_create_admin(phone, password, first_name, last_name))
        except CommandError as exc:
            print(f"Error: {exc}")
            sys.exit(1)
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
