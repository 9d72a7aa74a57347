"""Print progression summaries for one or more users"""
import argparse
import asyncio
import logging
import sys
import os
from datetime import date

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fitcoach.config import validate_config
from fitcoach.db.connection import db
from fitcoach.db.progression_queries import PostgresProgressionRepository
from fitcoach.gamification.tier_system import get_tier_info
from fitcoach.gamification.xp_system import format_xp
from fitcoach.logging_config import setup_logging
from fitcoach.services.progression_service import ProgressionService

setup_logging()
logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_ids", nargs="+", help="User IDs to report on")
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=date.today(),
        help="Reference day in YYYY-MM-DD (defaults to the local date)"
    )
    return parser.parse_args()


async def main():
    """Load and print summaries"""
    args = parse_args()
    validate_config()

    await db.init_pool()
    try:
        service = ProgressionService(PostgresProgressionRepository(db))
        summaries = await service.get_progress_summaries(args.user_ids, args.today)
    finally:
        await db.close_pool()

    for summary in summaries:
        tier = get_tier_info(summary.tier).name if summary.tier is not None else "Unassessed"
        earned = [badge.name for badge in summary.badges if badge.earned]

        logger.info("=" * 60)
        logger.info(f"User {summary.user_id} ({tier})")
        logger.info(
            f"  {format_xp(summary.xp.total_xp)} - {summary.xp.current_rank} "
            f"({summary.xp.progress_percentage:.0f}% to {summary.xp.next_rank or 'max rank'})"
        )
        logger.info(
            f"  Streak: {summary.current_streak} days (best {summary.longest_streak})"
            f"{' - at risk today' if summary.streak_at_risk else ''}"
        )
        logger.info(f"  Badges: {', '.join(earned) if earned else 'none yet'}")


if __name__ == "__main__":
    asyncio.run(main())
