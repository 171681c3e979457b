"""
Insert sample users for local development.

Usage:
    uv run seed-users            # insert the sample users
    uv run seed-users --reset    # delete every user first
"""

import argparse
import asyncio
import logging

from app.api.schemas.user import UserCreate
from app.core.config import settings
from app.core.db import close_client, get_users_collection
from app.services.user_service import UserService

logger = logging.getLogger("scripts.seed_users")

SAMPLE_USERS = [
    {"name": "Ada Lovelace", "email": "ada@example.com", "age": 36},
    {"name": "Alan Turing", "email": "alan@example.com", "age": 41},
    {"name": "Grace Hopper", "email": "grace@example.com", "age": 85},
    {"name": "Edsger Dijkstra", "email": "edsger@example.com", "age": 72},
    {"name": "Barbara Liskov", "email": "barbara@example.com", "age": 29},
    {"name": "Donald Knuth", "email": "donald@example.com", "age": 18, "phone": "+1 555 0100"},
]


async def seed(reset: bool) -> int:
    collection = get_users_collection()
    service = UserService(collection)
    try:
        if reset:
            result = await collection.delete_many({})
            logger.info(f"Deleted {result.deleted_count} users")

        for user in SAMPLE_USERS:
            await service.create(UserCreate(**user))
        logger.info(
            f"Seeded {len(SAMPLE_USERS)} users into "
            f"{settings.mongodb_database}.{settings.mongodb_users_collection}"
        )
    finally:
        close_client()
    return len(SAMPLE_USERS)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--reset", action="store_true", help="delete all users before seeding")
    args = parser.parse_args()

    logging.basicConfig(level=settings.app_log_level)
    asyncio.run(seed(args.reset))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
