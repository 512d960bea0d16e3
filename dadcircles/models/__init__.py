"""
Domain models for the matching engine.
"""

from dadcircles.models.member import Child, Location, Member
from dadcircles.models.group import Group, GroupStatus, LifeStage
from dadcircles.models.matching import (
    MatchingConfig,
    MatchingResult,
    ApprovalResult,
    DeletionResult,
)

__all__ = [
    "Child",
    "Location",
    "Member",
    "Group",
    "GroupStatus",
    "LifeStage",
    "MatchingConfig",
    "MatchingResult",
    "ApprovalResult",
    "DeletionResult",
]
