"""
Member records as read from the profiles collection.

Only the fields the matching engine needs are modelled. Documents are
validated when they are turned into models, so malformed records (a
non-ObjectId ``_id``, a child that is not an object, a location that is not
an object) are rejected here with a ``ValidationError`` instead of surfacing
later in the pipeline.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Child(BaseModel):
    """A member's child. Life stage is derived from the date alone."""
    model_config = ConfigDict(populate_by_name=True)

    birth_year: int = Field(..., ge=1900, le=2200, alias="birthYear")
    birth_month: Optional[int] = Field(None, ge=1, le=12, alias="birthMonth")
    gender: Optional[str] = None
    # Legacy onboarding tag ("expecting" / "existing"), never used for classification
    type: Optional[str] = None


class Location(BaseModel):
    """City plus state/region code. Both parts are required."""
    model_config = ConfigDict(populate_by_name=True)

    city: str = Field(..., min_length=1)
    state_code: str = Field(..., min_length=1, alias="stateCode")

    @classmethod
    def from_document(cls, doc: Any) -> Optional["Location"]:
        """
        Build a location, or None when it is absent or either part is missing.

        Raises:
            pydantic.ValidationError: If the stored value is not a location object
        """
        if not doc:
            return None
        if isinstance(doc, dict) and (not doc.get("city") or not doc.get("stateCode")):
            return None
        return cls.model_validate(doc)

    def to_document(self) -> Dict[str, Any]:
        return {"city": self.city, "stateCode": self.state_code}


class Member(BaseModel):
    """An onboarded father who may be matched into a group."""
    id: str
    email: Optional[str] = None
    location: Optional[Location] = None
    children: List[Child] = Field(default_factory=list)
    eligible: bool = False
    group_id: Optional[str] = None
    matched_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _object_id(cls, value: Any) -> str:
        if isinstance(value, ObjectId):
            return str(value)
        if isinstance(value, str) and ObjectId.is_valid(value):
            return value
        raise ValueError(f"{value!r} is not a valid ObjectId")

    @property
    def primary_child(self) -> Optional[Child]:
        """The first child, the only one consulted for matching."""
        return self.children[0] if self.children else None

    @property
    def display_name(self) -> str:
        """Name shown to other group members."""
        if self.email:
            return self.email.split("@")[0]
        return "Dad"

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Member":
        """
        Build a member from a profiles document.

        Raises:
            pydantic.ValidationError: If the id, a child record or the
                location is malformed
        """
        group_id = doc.get("groupId")
        return cls(
            id=doc.get("_id"),
            email=doc.get("email"),
            location=Location.from_document(doc.get("location")),
            children=doc.get("children") or [],
            eligible=bool(doc.get("matchingEligible", False)),
            group_id=str(group_id) if group_id is not None else None,
            matched_at=doc.get("matchedAt"),
        )
