"""
Seed sample courts from CSV on startup.

Idempotent: a row is skipped when a court with the same name and street
address already exists. Existing courts are never modified.
"""

import csv
import logging
from pathlib import Path

from sqlalchemy import select

from court_directory.database import db
from court_directory.database.models import Court
from court_directory.services import court_service

logger = logging.getLogger(__name__)

SEED_DIR = Path(__file__).resolve().parent.parent / "seed"


async def _seed_courts_from_csv(session, csv_filename: str) -> int:
    """Seed courts from a CSV file. Returns count of new rows."""
    csv_path = SEED_DIR / csv_filename
    if not csv_path.exists():
        logger.warning("Courts CSV not found: %s", csv_path)
        return 0

    created = 0
    with open(csv_path, "r", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            result = await session.execute(
                select(Court.id).where(
                    Court.name == row["name"],
                    Court.address_street == row["address_street"],
                )
            )
            if result.first():
                continue
            await court_service.create_court(
                session,
                name=row["name"],
                address_street=row["address_street"],
                address_city=row["address_city"],
                address_state=row["address_state"],
                address_zip=row["address_zip"],
                num_courts=int(row["num_courts"]),
                court_type=row["court_type"],
                cost=row["cost"],
                cost_notes=row.get("cost_notes") or None,
                status=row["status"],
            )
            created += 1
    return created


async def seed_courts(csv_filename: str = "courts.csv") -> int:
    """Seed sample courts. Returns the number of courts created."""
    async with db.AsyncSessionLocal() as session:
        created = await _seed_courts_from_csv(session, csv_filename)
    logger.info("Seeded %d courts from %s", created, csv_filename)
    return created
