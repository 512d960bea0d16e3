"""
Pydantic models for matching request/response validation.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


# =============================================================================
# Request Schemas
# =============================================================================

class RunMatchingRequest(BaseModel):
    """Request body for a matching run. Omit both fields to match every location."""
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    stateCode: Optional[str] = Field(None, min_length=1, max_length=10)


# =============================================================================
# Response Schemas (used inside success_response data)
# =============================================================================

class LocationData(BaseModel):
    city: str
    stateCode: str


class GroupData(BaseModel):
    """Group in API responses."""
    id: str
    name: str
    location: LocationData
    lifeStage: str
    memberIds: List[str]
    memberEmails: List[str]
    memberCount: int
    status: str
    emailedMemberIds: List[str]
    introductionSentAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class MatchingRunData(BaseModel):
    """Matching run summary."""
    groupsCreated: int
    usersMatched: int
    usersUnmatched: int
    summary: str
    groups: List[GroupData]
    errors: List[str]


class MatchingStatsData(BaseModel):
    """Matching statistics."""
    totalUsers: int
    eligibleUsers: int
    matchedUsers: int
    unmatchedUsers: int


class UnmatchedMemberData(BaseModel):
    """Unmatched member in API responses."""
    id: str
    email: Optional[str] = None
    location: Optional[LocationData] = None
    lifeStage: Optional[str] = None
    childSummary: Optional[str] = None


class ApprovalData(BaseModel):
    """Approval outcome."""
    group: GroupData
    emailedMemberIds: List[str]
    failedMemberIds: List[str]
    message: str


class DeletionData(BaseModel):
    """Deletion outcome."""
    groupId: str
    releasedMemberIds: List[str]
    missingMemberIds: List[str]
    message: str
