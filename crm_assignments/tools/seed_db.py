"""Create tables and seed users / CRM records from CSV files.

Usage:
    python -m crm_assignments.tools.seed_db  # reads CSV_DATA_PATH (default: data)
    python -m crm_assignments.tools.seed_db --data-dir data
    python -m crm_assignments.tools.seed_db --drop  # drop existing data first
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from crm_assignments.adapters.csv_loader.loader import load_entities, load_users
from crm_assignments.adapters.persistence.database import Base, async_session_factory, engine
from crm_assignments.adapters.persistence.models import (
    AssignmentLogModel,
    CompanyModel,
    JobModel,
    PersonModel,
    UserProfileModel,
)
from crm_assignments.config import settings
from crm_assignments.domain.value_objects.enums import EntityType

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

ENTITY_MODELS = {
    EntityType.PEOPLE: PersonModel,
    EntityType.COMPANIES: CompanyModel,
    EntityType.JOBS: JobModel,
}

NAME_HINTS = {
    "users": ["user_profiles", "users", "team"],
    EntityType.PEOPLE: ["people", "leads", "contacts"],
    EntityType.COMPANIES: ["companies", "accounts"],
    EntityType.JOBS: ["jobs", "positions"],
}


async def create_tables(target: AsyncEngine = engine) -> None:
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _drop_data(session: AsyncSession) -> None:
    """Delete all rows, audit log first."""
    for model in [AssignmentLogModel, JobModel, CompanyModel, PersonModel, UserProfileModel]:
        await session.execute(delete(model))
    await session.commit()
    logger.info("Dropped all existing data")


async def seed(
    data_dir: Path,
    drop: bool = False,
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> dict[str, int]:
    """Seed from every recognised CSV in *data_dir*. Returns counts of inserted rows.

    Rows whose id already exists are skipped, so re-running is safe. Owners
    that do not match a known user are cleared rather than dangling.
    """
    counts = {"users": 0, **{t.value: 0 for t in EntityType}}

    user_csv = _find_csv(data_dir, NAME_HINTS["users"])
    if not user_csv:
        raise FileNotFoundError(
            f"No users CSV found in {data_dir}. Expected something like users.csv"
        )

    async with session_factory() as session:
        if drop:
            await _drop_data(session)

        # 1. Users
        existing_users = set((await session.execute(select(UserProfileModel.id))).scalars())
        for ud in load_users(user_csv):
            if ud["id"] in existing_users:
                logger.debug("User '%s' already exists, skipping", ud["email"])
                continue
            session.add(UserProfileModel(**ud))
            existing_users.add(ud["id"])
            counts["users"] += 1
        await session.commit()

        # 2. People, companies, jobs
        for entity_type, model in ENTITY_MODELS.items():
            csv_path = _find_csv(data_dir, NAME_HINTS[entity_type])
            if not csv_path:
                logger.info("No %s CSV found, skipping", entity_type.value)
                continue

            existing_ids = set((await session.execute(select(model.id))).scalars())
            for record in load_entities(csv_path, entity_type):
                if record["id"] in existing_ids:
                    continue
                if record["owner_id"] and record["owner_id"] not in existing_users:
                    logger.warning(
                        "%s %s: unknown owner '%s', importing unassigned",
                        entity_type.value, record["id"], record["owner_id"],
                    )
                    record["owner_id"] = None
                session.add(model(**record))
                existing_ids.add(record["id"])
                counts[entity_type.value] += 1
            await session.commit()

    logger.info(
        "Seed complete: %d users, %d people, %d companies, %d jobs",
        counts["users"], counts["people"], counts["companies"], counts["jobs"],
    )
    return counts


def _find_csv(data_dir: Path, name_hints: list[str]) -> Path | None:
    """Find a CSV file matching any of the name hints."""
    for f in sorted(data_dir.glob("*.csv")):
        fname_lower = f.stem.lower()
        for hint in name_hints:
            if hint in fname_lower:
                logger.info("Found CSV: %s (matched hint '%s')", f.name, hint)
                return f
    return None


async def _verify_data() -> None:
    """Print ownership sanity checks after seeding."""
    async with async_session_factory() as session:
        users = (await session.execute(select(func.count(UserProfileModel.id)))).scalar() or 0
        active = (
            await session.execute(
                select(func.count(UserProfileModel.id)).where(UserProfileModel.is_active.is_(True))
            )
        ).scalar() or 0

        print(f"\n{'='*50}")
        print("SEED VERIFICATION")
        print(f"{'='*50}")
        print(f"Users:     {users} ({active} active)")
        for entity_type, model in ENTITY_MODELS.items():
            total = (await session.execute(select(func.count(model.id)))).scalar() or 0
            owned = (
                await session.execute(select(func.count(model.id)).where(model.owner_id.is_not(None)))
            ).scalar() or 0
            print(f"{entity_type.value.capitalize():<10} {total} ({owned} assigned)")
        print(f"{'='*50}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed the CRM database from CSV files")
    parser.add_argument(
        "--data-dir", type=str, default=settings.csv_data_path,
        help=f"Directory containing CSV files (default: CSV_DATA_PATH, currently {settings.csv_data_path})",
    )
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing data before seeding",
    )
    parser.add_argument(
        "--verify-only", action="store_true",
        help="Only run verification, don't seed",
    )
    return parser


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)

    data_dir = Path(args.data_dir)
    if not args.verify_only and not data_dir.exists():
        logger.error("Data directory not found: %s", data_dir)
        sys.exit(1)

    if args.verify_only:
        asyncio.run(_verify_data())
    else:
        async def run_all():
            await create_tables()
            await seed(data_dir, drop=args.drop)
            await _verify_data()
        asyncio.run(run_all())


if __name__ == "__main__":
    main()
