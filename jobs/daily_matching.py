"""
Daily matching background job.

Runs one full matching pass over every location and leaves the new groups
pending for admin review. This job should be run daily via CRON.

Usage:
    Run via CRON:
        0 3 * * * cd /path/to/project && python -m jobs.daily_matching

    Or run directly:
        python -m jobs.daily_matching
"""

import asyncio
import logging
import sys
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from dadcircles.config import settings
from dadcircles.models.matching import MatchingConfig
from dadcircles.pipelines.matching import run_matching_pass
from dadcircles.services.matching.assignment_service import GroupAssignmentService
from dadcircles.services.matching.member_pool_service import MemberPoolService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class DailyMatchingJob:
    """
    Matches every unmatched member that can be matched today.

    Actions performed:
    1. Reads the unmatched pool across all locations
    2. Forms and persists pending groups
    3. Reports counts and per-group errors
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        config: Optional[MatchingConfig] = None,
        use_transactions: bool = False,
    ):
        """
        Initialize the daily matching job.

        Args:
            db: MongoDB database holding profiles and groups
            config: Matching config (defaults if omitted)
            use_transactions: Wrap each group assignment in a transaction
        """
        self._config = config or MatchingConfig()
        self._pool_service = MemberPoolService(db=db)
        self._assignment_service = GroupAssignmentService(db=db, use_transactions=use_transactions)

    async def run(self, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Execute the daily matching job.

        Returns:
            Dict with job results including counts and any errors
        """
        logger.info("Starting daily matching job")
        start_time = datetime.now(timezone.utc)

        results: Dict[str, Any] = {
            "startTime": start_time.isoformat(),
            "groupsCreated": 0,
            "usersMatched": 0,
            "usersUnmatched": 0,
            "summary": "",
            "errors": [],
        }

        try:
            result = await run_matching_pass(
                pool_service=self._pool_service,
                assignment_service=self._assignment_service,
                config=self._config,
                today=today,
            )
            results["groupsCreated"] = len(result.groups_created)
            results["usersMatched"] = result.users_matched
            results["usersUnmatched"] = result.users_unmatched
            results["summary"] = result.summary
            results["errors"].extend(result.errors)

        except Exception as e:
            error_msg = f"Job failed: {str(e)}"
            logger.error(error_msg)
            results["errors"].append(error_msg)

        results["endTime"] = datetime.now(timezone.utc).isoformat()
        results["durationSeconds"] = (
            datetime.now(timezone.utc) - start_time
        ).total_seconds()

        logger.info(
            f"Daily matching job completed. "
            f"Groups: {results['groupsCreated']}, "
            f"Errors: {len(results['errors'])}"
        )

        return results


async def main():
    """Main entry point for the daily matching job."""
    client = AsyncIOMotorClient(settings.MONGODB_URI)

    job = DailyMatchingJob(
        db=client[settings.MONGODB_DATABASE],
        config=settings.get_matching_config(),
        use_transactions=settings.MATCHING_USE_TRANSACTIONS,
    )

    try:
        results = await job.run()

        print("\n=== Daily Matching Job Results ===")
        print(f"Start Time: {results['startTime']}")
        print(f"End Time: {results['endTime']}")
        print(f"Duration: {results['durationSeconds']:.2f} seconds")
        print(f"Groups Created: {results['groupsCreated']}")
        print(f"Users Matched: {results['usersMatched']}")
        print(f"Users Unmatched: {results['usersUnmatched']}")
        print(f"Summary: {results['summary']}")

        if results["errors"]:
            print(f"\nErrors ({len(results['errors'])}):")
            for error in results["errors"]:
                print(f"  - {error}")

        exit_code = 1 if results["errors"] else 0
        sys.exit(exit_code)

    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(main())
