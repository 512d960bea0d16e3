"""
Age-proximity sorting, chunking and age-gap validation.

A partition (one location, one life stage) is sorted by proximity score and
sliced into consecutive chunks of ``max_group_size``. A trailing chunk
shorter than ``min_group_size`` stays unmatched. Each remaining chunk is then
handed to a chunk policy, which decides which chunks become groups.

The default policy, ``drop_chunk_on_gap_failure``, discards any chunk whose
score spread exceeds the stage's threshold. It never re-slices a failed
chunk, so up to ``max_group_size - 1`` members can miss a match even when a
smaller valid sub-chunk existed. Swap the policy to change that.
"""

from datetime import date
from typing import Callable, List

from config.matching_config import DAYS_PER_MONTH
from dadcircles.models.group import LifeStage
from dadcircles.models.matching import MatchingConfig
from dadcircles.models.member import Member
from dadcircles.services.matching.life_stage import age_in_months

Chunk = List[Member]
ChunkPolicy = Callable[[List[Chunk], LifeStage, date, MatchingConfig], List[Chunk]]


def proximity_score(member: Member, stage: LifeStage, today: date) -> float:
    """
    Ordering key within a partition, in months.

    Expecting: signed distance from today to the first day of the due month,
    using 30-day months (smaller is sooner). Other stages: age in months.
    """
    child = member.primary_child
    if child is None:
        raise ValueError(f"Member {member.id} has no child to score")

    if stage == LifeStage.EXPECTING:
        due_date = date(child.birth_year, child.birth_month or 1, 1)
        return (due_date - today).days / DAYS_PER_MONTH

    return float(age_in_months(child, today))


def sort_by_proximity(members: List[Member], stage: LifeStage, today: date) -> List[Member]:
    """Stable ascending sort by proximity score."""
    return sorted(members, key=lambda m: proximity_score(m, stage, today))


def chunk_members(sorted_members: List[Member], config: MatchingConfig) -> List[Chunk]:
    """Slice into chunks of max_group_size, dropping a short trailing chunk."""
    chunks = []
    for start in range(0, len(sorted_members), config.max_group_size):
        chunk = sorted_members[start:start + config.max_group_size]
        if len(chunk) < config.min_group_size:
            break
        chunks.append(chunk)
    return chunks


def age_gap_months(members: List[Member], stage: LifeStage, today: date) -> float:
    """Spread between the largest and smallest proximity score."""
    if len(members) < 2:
        return 0.0
    scores = [proximity_score(m, stage, today) for m in members]
    return max(scores) - min(scores)


def is_within_age_gap(
    members: List[Member],
    stage: LifeStage,
    today: date,
    config: MatchingConfig,
) -> bool:
    return age_gap_months(members, stage, today) <= config.max_gap_for(stage)


def drop_chunk_on_gap_failure(
    chunks: List[Chunk],
    stage: LifeStage,
    today: date,
    config: MatchingConfig,
) -> List[Chunk]:
    """Keep chunks that pass the age-gap check; drop the rest whole."""
    return [c for c in chunks if is_within_age_gap(c, stage, today, config)]


def form_candidate_groups(
    members: List[Member],
    stage: LifeStage,
    today: date,
    config: MatchingConfig,
    policy: ChunkPolicy = drop_chunk_on_gap_failure,
) -> List[Chunk]:
    """Sort, chunk and validate one partition. Returns the chunks to assign."""
    if len(members) < config.min_group_size:
        return []

    chunks = chunk_members(sort_by_proximity(members, stage, today), config)
    return policy(chunks, stage, today, config)
