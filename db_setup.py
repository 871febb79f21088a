#!/usr/bin/env python3
"""
Database setup script.
Creates, drops and resets the HomeVerse tables, seeds sample listings
and creates administrator accounts.

Usage:
    python db_setup.py create
    python db_setup.py seed
    python db_setup.py create-admin --username admin --email admin@example.com --password secret123
    python db_setup.py reset --confirm
"""

import asyncio
import sys
import argparse
import logging
from typing import List, Optional

from homeverse.config import Settings, get_settings
from homeverse.database import Database
from homeverse.models import User, UserRole, PropertyType, PropertyStatus
from homeverse.repositories.database import DatabaseStorage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


SAMPLE_PASSWORD = "password123"

SAMPLE_USERS = [
    {
        "username": "admin",
        "email": "admin@homeverse.example",
        "first_name": "Site",
        "last_name": "Admin",
        "role": UserRole.ADMIN,
    },
    {
        "username": "agent_jane",
        "email": "jane@homeverse.example",
        "first_name": "Jane",
        "last_name": "Smith",
        "phone": "+1-555-0101",
        "role": UserRole.AGENT,
    },
    {
        "username": "seller_bob",
        "email": "bob@homeverse.example",
        "first_name": "Bob",
        "last_name": "Brown",
        "role": UserRole.SELLER,
    },
    {
        "username": "buyer_ann",
        "email": "ann@homeverse.example",
        "first_name": "Ann",
        "last_name": "Lee",
        "role": UserRole.BUYER,
    },
]

SAMPLE_PROPERTIES = [
    {
        "owner": "agent_jane",
        "title": "Modern Family House",
        "description": "Bright four-bedroom house with an open kitchen and a large garden.",
        "price": 450000,
        "address": "12 Oak Avenue",
        "city": "Austin",
        "state": "TX",
        "zip_code": "78701",
        "country": "USA",
        "property_type": PropertyType.HOUSE,
        "status": PropertyStatus.FOR_SALE,
        "bedrooms": 4,
        "bathrooms": 3,
        "area": 2400,
        "year_built": 2015,
        "features": ["garage", "garden", "fireplace"],
    },
    {
        "owner": "agent_jane",
        "title": "Downtown Loft Apartment",
        "description": "Loft with floor-to-ceiling windows close to restaurants and transit.",
        "price": 2800,
        "address": "400 Congress Ave, Apt 12B",
        "city": "Austin",
        "state": "TX",
        "zip_code": "78701",
        "country": "USA",
        "property_type": PropertyType.APARTMENT,
        "status": PropertyStatus.FOR_RENT,
        "bedrooms": 1,
        "bathrooms": 1,
        "area": 850,
        "year_built": 2008,
        "features": ["gym", "doorman"],
    },
    {
        "owner": "seller_bob",
        "title": "Beachfront Villa",
        "description": "Five-bedroom villa with a private pool and direct beach access.",
        "price": 1250000,
        "address": "8 Ocean Drive",
        "city": "Miami",
        "state": "FL",
        "zip_code": "33139",
        "country": "USA",
        "property_type": PropertyType.VILLA,
        "status": PropertyStatus.FOR_SALE,
        "bedrooms": 5,
        "bathrooms": 4,
        "area": 4200,
        "year_built": 2019,
        "features": ["pool", "ocean view", "garage"],
    },
    {
        "owner": "seller_bob",
        "title": "Cozy City Condo",
        "description": "Two-bedroom condo with a balcony overlooking the park.",
        "price": 310000,
        "address": "77 Park Street, Unit 5",
        "city": "Denver",
        "state": "CO",
        "zip_code": "80202",
        "country": "USA",
        "property_type": PropertyType.CONDO,
        "status": PropertyStatus.FOR_SALE,
        "bedrooms": 2,
        "bathrooms": 2,
        "area": 1100,
        "year_built": 2001,
        "features": ["balcony"],
    },
]


class DatabaseSetup:
    """Runs table management and seeding against one database."""

    def __init__(self, settings: Settings, database: Optional[Database] = None):
        self.settings = settings
        self.database = database or Database(settings.database_url)

    async def create_tables(self) -> None:
        if not await self.database.test_connection():
            raise RuntimeError("Cannot connect to database")
        await self.database.create_tables()

    async def drop_tables(self) -> None:
        self._ensure_not_production("drop")
        await self.database.drop_tables()

    async def reset(self) -> None:
        """Drop and recreate all tables."""
        self._ensure_not_production("reset")
        await self.database.drop_tables()
        await self.database.create_tables()
        logger.info("Database reset complete")

    async def seed(self) -> List[int]:
        """
        Insert sample users and listings. Existing usernames are reused.

        Returns:
            IDs of the properties that were created
        """
        await self.database.create_tables()
        created_ids = []

        async with self.database.session() as session:
            storage = DatabaseStorage(session)
            owners = {}

            for user_data in SAMPLE_USERS:
                user = await storage.get_user_by_username(user_data["username"])
                if user is None:
                    user = await storage.create_user({
                        **user_data,
                        "hashed_password": User.hash_password(SAMPLE_PASSWORD),
                    })
                    logger.info(f"Seeded user {user.username} ({user.role.value})")
                owners[user.username] = user

            for property_data in SAMPLE_PROPERTIES:
                data = dict(property_data)
                owner = owners[data.pop("owner")]
                data["user_id"] = owner.id
                property_obj = await storage.create_property(data)
                created_ids.append(property_obj.id)

        logger.info(f"Seeded {len(created_ids)} properties")
        return created_ids

    async def create_admin(self, username: str, email: str, password: str) -> User:
        """
        Create an administrator account.

        Raises:
            ValueError: If the username or email is already registered
        """
        await self.database.create_tables()

        async with self.database.session() as session:
            storage = DatabaseStorage(session)
            if await storage.get_user_by_username(username) is not None:
                raise ValueError(f"Username {username} already exists")
            if await storage.get_user_by_email(email) is not None:
                raise ValueError(f"Email {email} already exists")

            user = await storage.create_user({
                "username": username,
                "email": email,
                "hashed_password": User.hash_password(password),
                "role": UserRole.ADMIN,
            })

        logger.info(f"Created admin user {user.username} (ID: {user.id})")
        return user

    async def close(self) -> None:
        await self.database.dispose()

    def _ensure_not_production(self, action: str) -> None:
        if self.settings.is_production:
            raise RuntimeError(f"Refusing to {action} the database in production")


async def run_command(args: argparse.Namespace, setup: DatabaseSetup) -> None:
    try:
        if args.command == "create":
            await setup.create_tables()
        elif args.command == "drop":
            await setup.drop_tables()
        elif args.command == "reset":
            await setup.reset()
        elif args.command == "seed":
            await setup.seed()
        elif args.command == "create-admin":
            await setup.create_admin(args.username, args.email, args.password)
    finally:
        await setup.close()


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI interface for database setup."""
    parser = argparse.ArgumentParser(description="HomeVerse database setup")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")

    drop_parser = subparsers.add_parser("drop", help="Drop all tables (non-production only)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping tables")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate tables (non-production only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    subparsers.add_parser("seed", help="Seed sample users and listings")

    admin_parser = subparsers.add_parser("create-admin", help="Create an administrator account")
    admin_parser.add_argument("--username", required=True)
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--password", required=True)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    if args.command in ("drop", "reset") and not args.confirm:
        logger.error(f"'{args.command}' deletes all data. Re-run with --confirm")
        sys.exit(1)

    settings = get_settings()
    if settings.uses_memory_storage:
        logger.error("STORAGE_BACKEND is 'memory'; there is no database to set up")
        sys.exit(1)

    try:
        asyncio.run(run_command(args, DatabaseSetup(settings)))
    except (RuntimeError, ValueError) as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
