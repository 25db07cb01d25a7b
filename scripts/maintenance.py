"""
Taste Palette Maintenance Runner

Runs the weekly maintenance jobs against the configured database.

Usage:
    python scripts/maintenance.py reset
    python scripts/maintenance.py marketing
    python scripts/maintenance.py all
    python scripts/maintenance.py schedule

``schedule`` keeps running and fires each job on its weekly slot
(upload reset Monday 00:00 UTC, marketing emails Wednesday 10:00 UTC).
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add backend to path
backend_root = Path(__file__).parent.parent
sys.path.insert(0, str(backend_root))

from database import Database  # noqa: E402
from settings import settings  # noqa: E402
from app.services import maintenance  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

COMMANDS = {
    "reset": maintenance.reset_weekly_uploads,
    "marketing": maintenance.send_marketing_emails,
    "all": maintenance.run_maintenance,
    "schedule": maintenance.run_scheduler,
}


async def run(command: str) -> None:
    await Database.connect_db(settings.DATABASE_URL, settings.DATABASE_NAME)
    try:
        await COMMANDS[command]()
    finally:
        await Database.close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Taste Palette maintenance jobs")
    parser.add_argument("command", choices=sorted(COMMANDS))
    args = parser.parse_args()

    logger.info(f"Starting maintenance command: {args.command}")
    asyncio.run(run(args.command))
    logger.info("Maintenance finished")


if __name__ == "__main__":
    main()
