"""演示数据：python -m chirper.seed"""

import argparse
import asyncio

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from chirper.config import get_settings
from chirper.core.database import database
from chirper.core.logging import setup_logging
from chirper.core.security import hash_password
from chirper.modules.chirp.models import Chirp
from chirper.modules.like.models import Like
from chirper.modules.profile.models import Profile

DEFAULT_PASSWORD = "password123"

PROFILES = [
    ("alice_dev", "Alice Developer", "Full-stack developer who loves Python and coffee", "alice@example.com"),
    ("bob_codes", "Bob the Builder", "Building the future, one commit at a time", "bob@example.com"),
    ("charlie_design", "Charlie Designer", "UI/UX enthusiast. Making apps beautiful and intuitive", "charlie@example.com"),
    ("diana_data", "Diana Analytics", "Data scientist turning numbers into insights", "diana@example.com"),
]

# (作者下标, 内容)
CHIRPS = [
    (0, "Just deployed our new async stack! The type hints are incredible. #python #webdev"),
    (1, "Working on a new feature branch. Git flow is life! #git #development"),
    (2, "Figma to code is such a satisfying workflow. Clean designs make clean code! #design"),
    (3, "User engagement is up 23% this quarter! #analytics #data"),
    (0, "Hot take: code reviews are the best form of knowledge sharing. Change my mind!"),
    (1, 'Why do we call it "debugging"? Because "de-featuring" does not sound as nice #humor'),
    (2, "New icon set just dropped! Minimal, clean, and perfectly aligned."),
    (3, "SQL query optimisation complete. Went from 2s to 150ms! #database #performance"),
]

# (点赞者下标, chirp 下标)
LIKES = [
    (1, 0), (2, 0), (3, 0),
    (0, 1), (2, 1),
    (0, 2), (1, 2),
    (0, 3),
    (2, 4),
    (3, 5),
]


async def seed(session: AsyncSession, password: str = DEFAULT_PASSWORD) -> dict[str, int]:
    """清空并写入演示数据，返回各表写入条数"""
    await session.execute(delete(Like))
    await session.execute(delete(Chirp))
    await session.execute(delete(Profile))

    password_hash = await run_in_threadpool(hash_password, password)
    profiles = [
        Profile(
            username=username,
            display_name=display_name,
            bio=bio,
            email=email,
            password_hash=password_hash,
        )
        for username, display_name, bio, email in PROFILES
    ]
    session.add_all(profiles)
    await session.flush()

    chirps = [Chirp(profile_id=profiles[author].id, content=content) for author, content in CHIRPS]
    session.add_all(chirps)
    await session.flush()

    session.add_all(
        Like(profile_id=profiles[liker].id, chirp_id=chirps[chirp].id) for liker, chirp in LIKES
    )
    await session.flush()

    return {"profiles": len(profiles), "chirps": len(chirps), "likes": len(LIKES)}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Load Chirper demo profiles, chirps and likes",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--database-url", help="Override DB_DSN / DB_* settings")
    parser.add_argument("--password", default=DEFAULT_PASSWORD, help="Password for every demo profile")
    parser.add_argument("--create-schema", action="store_true", help="Create tables before seeding")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    setup_logging(get_settings().log_level)

    await database.connect(args.database_url)
    try:
        if args.create_schema:
            await database.create_all()
        async with database.transaction() as session:
            counts = await seed(session, args.password)
    finally:
        await database.disconnect()

    logger.info(
        "Seeded {profiles} profiles, {chirps} chirps, {likes} likes",
        **counts,
    )


if __name__ == "__main__":
    asyncio.run(main())
