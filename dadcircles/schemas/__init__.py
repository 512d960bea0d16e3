"""
Pydantic request/response schemas for the DadCircles API.
"""

from dadcircles.schemas.matching import (
    RunMatchingRequest,
    GroupData,
    MatchingRunData,
    MatchingStatsData,
    UnmatchedMemberData,
    ApprovalData,
    DeletionData,
)

__all__ = [
    "RunMatchingRequest",
    "GroupData",
    "MatchingRunData",
    "MatchingStatsData",
    "UnmatchedMemberData",
    "ApprovalData",
    "DeletionData",
]
