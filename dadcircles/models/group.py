"""
Group records and the enums shared by the matching engine.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, model_validator

from dadcircles.models.member import Location


class LifeStage(str, Enum):
    """Developmental stage of a member's first child."""
    EXPECTING = "Expecting"
    NEWBORN = "Newborn"
    INFANT = "Infant"
    TODDLER = "Toddler"


class GroupStatus(str, Enum):
    """
    Group lifecycle states.

    pending -> active    (approved, introductions sent)
    pending -> inactive  (rejected, members released, record removed)
    """
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Group(BaseModel):
    """A Dad Circle: members sharing one location and one life stage."""
    id: str
    name: str
    location: Location
    life_stage: LifeStage
    member_ids: List[str]
    member_emails: List[str] = Field(default_factory=list)
    status: GroupStatus = GroupStatus.PENDING
    emailed_member_ids: List[str] = Field(default_factory=list)
    introduction_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_members(self) -> "Group":
        if len(set(self.member_ids)) != len(self.member_ids):
            raise ValueError("member_ids must not contain duplicates")
        stray = set(self.emailed_member_ids) - set(self.member_ids)
        if stray:
            raise ValueError(f"emailed_member_ids not in member_ids: {sorted(stray)}")
        return self

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Group":
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name", ""),
            location=Location(
                city=doc["location"]["city"],
                state_code=doc["location"]["stateCode"],
            ),
            life_stage=LifeStage(doc["lifeStage"]),
            member_ids=[str(m) for m in doc.get("memberIds", [])],
            member_emails=list(doc.get("memberEmails", [])),
            status=GroupStatus(doc.get("status", GroupStatus.PENDING.value)),
            emailed_member_ids=[str(m) for m in doc.get("emailedMemberIds", [])],
            introduction_sent_at=doc.get("introductionSentAt"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "_id": ObjectId(self.id),
            "name": self.name,
            "location": self.location.to_document(),
            "lifeStage": self.life_stage.value,
            "memberIds": [ObjectId(m) for m in self.member_ids],
            "memberEmails": list(self.member_emails),
            "status": self.status.value,
            "emailedMemberIds": [ObjectId(m) for m in self.emailed_member_ids],
            "introductionSentAt": self.introduction_sent_at,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
