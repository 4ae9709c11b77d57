"""Print a user's timesheet CSV, grouped by Monday-Saturday work week.

Usage:
    python scripts/export_timesheet.py <user_id>
    python scripts/export_timesheet.py <user_id> --rate 42.5 --currency EUR
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient

from worktracker.config import settings
from worktracker.exceptions import ValidationError
from worktracker.models.user import Currency
from worktracker.services.exports import render_csv
from worktracker.services.profile_service import ProfileService
from worktracker.services.timer_service import TimerService
from worktracker.utils.clock import system_clock


async def export_timesheet(user_id: str, rate: float | None, currency: str | None) -> str:
    client = AsyncIOMotorClient(settings.mongodb_url)
    db = client[settings.mongodb_db_name]

    try:
        profile = await ProfileService(db).get_profile(user_id)
        entries = await TimerService(db).list_entries(user_id)
    finally:
        client.close()

    return render_csv(
        entries,
        hourly_rate=profile.hourly_rate if rate is None else rate,
        currency=Currency(currency) if currency else profile.settings.currency,
        now=system_clock.now(),
    )


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("user_id")
    parser.add_argument("--rate", type=float, default=None, help="Override hourly rate")
    parser.add_argument("--currency", choices=[item.value for item in Currency], default=None)
    args = parser.parse_args()

    try:
        print(asyncio.run(export_timesheet(args.user_id, args.rate, args.currency)), end="")
    except ValidationError as e:
        print(e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
