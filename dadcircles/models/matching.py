"""
Matching configuration and operation results.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from config.matching_config import MIN_GROUP_SIZE, MAX_GROUP_SIZE, MAX_AGE_GAP_MONTHS
from dadcircles.models.group import Group, LifeStage


def _default_age_gaps() -> Dict[LifeStage, float]:
    return {LifeStage(stage): gap for stage, gap in MAX_AGE_GAP_MONTHS.items()}


class MatchingConfig(BaseModel):
    """
    Group size bounds and per-stage age-gap thresholds.

    Passed explicitly through the matching pipeline so callers (and tests)
    can run with alternate thresholds.
    """
    model_config = ConfigDict(frozen=True)

    min_group_size: int = Field(MIN_GROUP_SIZE, ge=2)
    max_group_size: int = Field(MAX_GROUP_SIZE, ge=2)
    max_age_gap_months: Dict[LifeStage, float] = Field(default_factory=_default_age_gaps)

    @model_validator(mode="after")
    def _check_bounds(self) -> "MatchingConfig":
        if self.min_group_size > self.max_group_size:
            raise ValueError("min_group_size cannot exceed max_group_size")
        missing = [stage.value for stage in LifeStage if stage not in self.max_age_gap_months]
        if missing:
            raise ValueError(f"max_age_gap_months missing stages: {missing}")
        return self

    def max_gap_for(self, stage: LifeStage) -> float:
        return self.max_age_gap_months[stage]


class MatchingResult(BaseModel):
    """Summary of one matching pass."""
    groups_created: List[Group] = Field(default_factory=list)
    users_matched: int = 0
    users_unmatched: int = 0
    summary: str = ""
    errors: List[str] = Field(default_factory=list)


class ApprovalResult(BaseModel):
    """Outcome of approving a pending group."""
    group: Group
    emailed_member_ids: List[str] = Field(default_factory=list)
    failed_member_ids: List[str] = Field(default_factory=list)
    message: str = ""

    @property
    def fully_delivered(self) -> bool:
        return not self.failed_member_ids


class DeletionResult(BaseModel):
    """Outcome of deleting a pending group."""
    group_id: str
    released_member_ids: List[str] = Field(default_factory=list)
    missing_member_ids: List[str] = Field(default_factory=list)
    message: str = ""
