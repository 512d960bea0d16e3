"""
Matching pass pipeline.

Orchestrates one full pass over the unmatched pool:

    1. Read unmatched members (optionally for one location)
    2. Partition by location, then life stage
    3. Sort, chunk and validate each partition
    4. Assign every surviving chunk to a new pending group

Partitions are processed one after another. A failed assignment is logged,
recorded in the result and does not stop the pass. Re-running a pass is safe:
members assigned by an earlier pass are no longer in the pool.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from common.utils.exceptions import APIException
from dadcircles.models.matching import MatchingConfig, MatchingResult
from dadcircles.services.matching.assignment_service import GroupAssignmentService
from dadcircles.services.matching.chunking import (
    ChunkPolicy,
    drop_chunk_on_gap_failure,
    form_candidate_groups,
)
from dadcircles.services.matching.member_pool_service import MemberPoolService
from dadcircles.services.matching.partitioner import partition_members, split_location_key

logger = logging.getLogger(__name__)


async def run_matching_pass(
    pool_service: MemberPoolService,
    assignment_service: GroupAssignmentService,
    config: Optional[MatchingConfig] = None,
    city: Optional[str] = None,
    state_code: Optional[str] = None,
    today: Optional[date] = None,
    chunk_policy: ChunkPolicy = drop_chunk_on_gap_failure,
) -> MatchingResult:
    """
    Run one matching pass.

    Args:
        pool_service: Reader for the unmatched pool
        assignment_service: Writer for new groups
        config: Size bounds and age-gap thresholds (defaults if omitted)
        city: Only match members in this city (requires state_code)
        state_code: Only match members in this state/region (requires city)
        today: Reference date for life stages (defaults to today, UTC)
        chunk_policy: Decides which chunks become groups

    Returns:
        MatchingResult with created groups, counts and per-group errors

    Raises:
        ValidationException: If only one of city/state_code is given
    """
    config = config or MatchingConfig()
    today = today or datetime.now(timezone.utc).date()

    members = await pool_service.get_unmatched_members(city=city, state_code=state_code)
    if not members:
        logger.info("Matching pass: no unmatched users found")
        return MatchingResult(summary="No unmatched users found")

    result = MatchingResult()
    partitions = partition_members(members, today)

    for key, by_stage in partitions.items():
        location = split_location_key(key)

        for stage, partition in by_stage.items():
            chunks = form_candidate_groups(partition, stage, today, config, chunk_policy)
            logger.debug(
                f"{key} {stage.value}: {len(partition)} members, {len(chunks)} candidate groups"
            )

            for sequence, chunk in enumerate(chunks, start=1):
                try:
                    group = await assignment_service.assign_group(
                        location=location,
                        life_stage=stage,
                        members=chunk,
                        sequence=sequence,
                        config=config,
                    )
                except (APIException, InvalidId, PyMongoError) as e:
                    reason = e.message if isinstance(e, APIException) else str(e)
                    error = f"{key} {stage.value} group {sequence}: {reason}"
                    logger.error(f"Matching pass: {error}")
                    result.errors.append(error)
                    continue

                result.groups_created.append(group)
                result.users_matched += len(group.member_ids)

    result.users_unmatched = len(members) - result.users_matched
    result.summary = (
        f"Created {len(result.groups_created)} groups, matched {result.users_matched} users, "
        f"{result.users_unmatched} remain unmatched"
    )
    if result.errors:
        result.summary += f" ({len(result.errors)} errors)"

    logger.info(f"Matching pass: {result.summary}")
    return result
