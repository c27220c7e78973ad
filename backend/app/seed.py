"""
Ulyngo Backend — Seed Data
============================

Usage:
    python -m app.seed             insert default rows that are missing
    python -m app.seed --refresh   drop and recreate every table first

Rows are matched by name (categories, tags) or username (users), so running
the script twice inserts nothing the second time.
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import app.models  # noqa: F401  (registers tables on Base.metadata)
from app.database import Base, async_session_factory, dispose_engine, engine, utcnow
from app.models.marker import MarkerCategory, MarkerTag
from app.models.user import ROLE_ADMIN, ROLE_USER, User
from app.services.security import hash_password

logger = logging.getLogger("ulyngo.seed")

DEFAULT_CATEGORIES = [
    ("Restaurant", "Tempat makan dan kuliner"),
    ("Wisata Alam", "Pantai, gunung, danau dan tempat wisata alam lainnya"),
    ("Sejarah & Budaya", "Museum, situs sejarah dan tempat budaya"),
    ("Akomodasi", "Hotel, villa dan penginapan"),
    ("Transportasi", "Stasiun, terminal dan bandara"),
    ("Hiburan", "Taman hiburan, bioskop dan tempat rekreasi"),
]

DEFAULT_TAGS = [
    "Family-Friendly",
    "Pet-Friendly",
    "Sunset-View",
    "Live Music",
    "Hiking",
    "Snorkeling",
    "Budget-Friendly",
    "Luxury",
]

DEFAULT_USERS = [
    {
        "username": "superadmin",
        "email": "superadmin@ulyn.com",
        "password": "adminpassword",
        "role": ROLE_ADMIN,
        "whatsapp": None,
    },
    {
        "username": "raffa",
        "email": "raffa@ulyn.com",
        "password": "userpassword",
        "role": ROLE_USER,
        "whatsapp": "6281220544440",
    },
]


async def seed_categories(db: AsyncSession) -> int:
    existing = set((await db.execute(select(MarkerCategory.name))).scalars())
    added = 0
    for name, description in DEFAULT_CATEGORIES:
        if name not in existing:
            db.add(MarkerCategory(name=name, description=description))
            added += 1
    return added


async def seed_tags(db: AsyncSession) -> int:
    existing = set((await db.execute(select(MarkerTag.name))).scalars())
    added = 0
    for name in DEFAULT_TAGS:
        if name not in existing:
            db.add(MarkerTag(name=name))
            added += 1
    return added


async def seed_users(db: AsyncSession) -> int:
    existing = set((await db.execute(select(User.username))).scalars())
    added = 0
    for entry in DEFAULT_USERS:
        if entry["username"] in existing:
            continue
        db.add(
            User(
                username=entry["username"],
                email=entry["email"],
                password_hash=hash_password(entry["password"]),
                role=entry["role"],
                whatsapp=entry["whatsapp"],
                last_active_at=utcnow(),
            )
        )
        added += 1
    return added


async def run(refresh: bool = False) -> None:
    if refresh:
        logger.warning("Dropping and recreating all tables")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        async with db.begin():
            categories = await seed_categories(db)
            tags = await seed_tags(db)
            users = await seed_users(db)

    logger.info("Seeded %d categories, %d tags, %d users", categories, tags, users)
    await dispose_engine()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Insert default Ulyngo data.")
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="drop and recreate all tables before seeding",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    asyncio.run(run(refresh=args.refresh))


if __name__ == "__main__":
    main()
