"""
FastAPI router for matching endpoints.

Admin-only triggers for matching runs and group review.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from common.utils import success_response, list_response
from dadcircles.dependencies import (
    require_admin,
    get_member_pool_service,
    get_assignment_service,
    get_lifecycle_service,
    get_matching_config,
)
from dadcircles.models.group import Group, GroupStatus
from dadcircles.models.matching import MatchingConfig
from dadcircles.models.member import Member
from dadcircles.pipelines.matching import run_matching_pass
from dadcircles.schemas.matching import (
    RunMatchingRequest,
    LocationData,
    GroupData,
    MatchingRunData,
    MatchingStatsData,
    UnmatchedMemberData,
    ApprovalData,
    DeletionData,
)
from dadcircles.services.matching.assignment_service import GroupAssignmentService
from dadcircles.services.matching.lifecycle_service import GroupLifecycleService
from dadcircles.services.matching.life_stage import classify_member, describe_child
from dadcircles.services.matching.member_pool_service import MemberPoolService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matching", tags=["matching"])


def _format_group(group: Group) -> dict:
    """Format group for response."""
    return GroupData(
        id=group.id,
        name=group.name,
        location=LocationData(city=group.location.city, stateCode=group.location.state_code),
        lifeStage=group.life_stage.value,
        memberIds=group.member_ids,
        memberEmails=group.member_emails,
        memberCount=len(group.member_ids),
        status=group.status.value,
        emailedMemberIds=group.emailed_member_ids,
        introductionSentAt=group.introduction_sent_at,
        createdAt=group.created_at,
        updatedAt=group.updated_at,
    ).model_dump(mode="json")


def _format_member(member: Member) -> dict:
    """Format unmatched member for response."""
    today = datetime.now(timezone.utc).date()
    stage = classify_member(member, today)
    child = member.primary_child
    location = None
    if member.location:
        location = LocationData(city=member.location.city, stateCode=member.location.state_code)

    return UnmatchedMemberData(
        id=member.id,
        email=member.email,
        location=location,
        lifeStage=stage.value if stage else None,
        childSummary=describe_child(child, today) if child else None,
    ).model_dump(mode="json")


@router.post("/run")
async def run_matching(
    claims: Annotated[dict, Depends(require_admin)],
    pool_service: Annotated[MemberPoolService, Depends(get_member_pool_service)],
    assignment_service: Annotated[GroupAssignmentService, Depends(get_assignment_service)],
    config: Annotated[MatchingConfig, Depends(get_matching_config)],
    body: Optional[RunMatchingRequest] = None,
):
    """
    Run a matching pass.

    Matches every location, or a single one when both city and stateCode
    are given.
    """
    body = body or RunMatchingRequest()
    logger.info(f"Matching run requested by {claims.get('sub')} (city={body.city}, state={body.stateCode})")

    result = await run_matching_pass(
        pool_service=pool_service,
        assignment_service=assignment_service,
        config=config,
        city=body.city,
        state_code=body.stateCode,
    )

    return success_response(
        MatchingRunData(
            groupsCreated=len(result.groups_created),
            usersMatched=result.users_matched,
            usersUnmatched=result.users_unmatched,
            summary=result.summary,
            groups=[_format_group(g) for g in result.groups_created],
            errors=result.errors,
        ).model_dump(mode="json"),
        message=result.summary,
    )


@router.get("/stats")
async def get_matching_stats(
    claims: Annotated[dict, Depends(require_admin)],
    pool_service: Annotated[MemberPoolService, Depends(get_member_pool_service)],
):
    """Get member counts by matching state."""
    stats = await pool_service.get_matching_stats()
    return success_response(MatchingStatsData(**stats).model_dump())


@router.get("/unmatched")
async def list_unmatched_members(
    claims: Annotated[dict, Depends(require_admin)],
    pool_service: Annotated[MemberPoolService, Depends(get_member_pool_service)],
    city: Optional[str] = Query(None),
    state_code: Optional[str] = Query(None, alias="stateCode"),
):
    """List eligible members waiting for a group."""
    members = await pool_service.get_unmatched_members(city=city, state_code=state_code)
    return list_response([_format_member(m) for m in members])


@router.get("/groups")
async def list_groups(
    claims: Annotated[dict, Depends(require_admin)],
    lifecycle_service: Annotated[GroupLifecycleService, Depends(get_lifecycle_service)],
    status: Optional[GroupStatus] = Query(None),
    city: Optional[str] = Query(None),
    state_code: Optional[str] = Query(None, alias="stateCode"),
):
    """List groups, newest first."""
    groups = await lifecycle_service.list_groups(status=status, city=city, state_code=state_code)
    return list_response([_format_group(g) for g in groups])


@router.get("/groups/{group_id}")
async def get_group(
    group_id: str,
    claims: Annotated[dict, Depends(require_admin)],
    lifecycle_service: Annotated[GroupLifecycleService, Depends(get_lifecycle_service)],
):
    """Get a group by ID."""
    group = await lifecycle_service.get_group(group_id)
    return success_response({"group": _format_group(group)})


@router.post("/groups/{group_id}/approve")
async def approve_group(
    group_id: str,
    claims: Annotated[dict, Depends(require_admin)],
    lifecycle_service: Annotated[GroupLifecycleService, Depends(get_lifecycle_service)],
):
    """Approve a pending group and send introduction emails."""
    result = await lifecycle_service.approve_group(group_id)
    logger.info(f"Group {group_id} approved by {claims.get('sub')}")

    return success_response(
        ApprovalData(
            group=_format_group(result.group),
            emailedMemberIds=result.emailed_member_ids,
            failedMemberIds=result.failed_member_ids,
            message=result.message,
        ).model_dump(mode="json"),
        message=result.message,
    )


@router.post("/groups/{group_id}/delete")
async def delete_group(
    group_id: str,
    claims: Annotated[dict, Depends(require_admin)],
    lifecycle_service: Annotated[GroupLifecycleService, Depends(get_lifecycle_service)],
):
    """Delete a pending group and return its members to the pool."""
    result = await lifecycle_service.delete_group(group_id)
    logger.info(f"Group {group_id} deleted by {claims.get('sub')}")

    return success_response(
        DeletionData(
            groupId=result.group_id,
            releasedMemberIds=result.released_member_ids,
            missingMemberIds=result.missing_member_ids,
            message=result.message,
        ).model_dump(),
        message=result.message,
    )
