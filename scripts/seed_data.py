#!/usr/bin/env python3
"""
Seed script: panel catalog, a moderator and a few regular users.
There is no catalog API, so rows are written directly through the ORM.
Run after `alembic upgrade head` (or pass --create-tables for a local SQLite database):
  python scripts/seed_data.py
  python scripts/seed_data.py --users 20 --moderator-login admin --moderator-password secret123
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from solarpanels.core.security import hash_password
from solarpanels.db.models import SolarPanel, User
from solarpanels.db.session import async_session_maker, create_tables

# (title, type, rated power W, width mm, height mm)
PANELS = [
    ("Mono PERC 400", "monocrystalline", 400, 1134, 1722),
    ("Mono PERC 450", "monocrystalline", 450, 1134, 1903),
    ("Poly 330", "polycrystalline", 330, 992, 1956),
    ("Poly 280", "polycrystalline", 280, 992, 1650),
    ("Thin Film 150", "thin-film", 150, 1200, 600),
    ("Bifacial 540", "bifacial", 540, 1134, 2279),
    ("Half-cut 410", "monocrystalline", 410, 1134, 1722),
    ("Flexible 100", "thin-film", 100, 540, 1050),
]


async def seed(args) -> dict:
    if args.create_tables:
        await create_tables()
    counts = {"panels": 0, "users": 0, "moderators": 0}
    async with async_session_maker() as session:
        existing = set((await session.execute(select(SolarPanel.title))).scalars().all())
        for title, panel_type, power, width, height in PANELS:
            if title in existing:
                continue
            session.add(SolarPanel(title=title, type=panel_type, power=power, width=width, height=height))
            counts["panels"] += 1

        logins = set((await session.execute(select(User.login))).scalars().all())
        if args.moderator_login not in logins:
            session.add(
                User(
                    login=args.moderator_login,
                    hashed_password=hash_password(args.moderator_password),
                    is_moderator=True,
                )
            )
            counts["moderators"] += 1
        for i in range(args.users):
            login = f"user{i + 1}"
            if login in logins:
                continue
            session.add(User(login=login, hashed_password=hash_password("password123"), is_moderator=False))
            counts["users"] += 1

        await session.commit()
    return counts


def main():
    ap = argparse.ArgumentParser(description="Seed panel catalog and accounts")
    ap.add_argument("--users", type=int, default=5, help="Number of regular users to create")
    ap.add_argument("--moderator-login", default="moderator")
    ap.add_argument("--moderator-password", default="moderator123")
    ap.add_argument(
        "--create-tables",
        action="store_true",
        help="Create the schema without Alembic (local SQLite)",
    )
    args = ap.parse_args()

    counts = asyncio.run(seed(args))
    print(
        f"Done. Panels: +{counts['panels']}, moderators: +{counts['moderators']}, users: +{counts['users']}"
    )


if __name__ == "__main__":
    main()
