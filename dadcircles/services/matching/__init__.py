"""
Matching engine: classification, partitioning, chunking, assignment and lifecycle.
"""

from dadcircles.services.matching.member_pool_service import MemberPoolService
from dadcircles.services.matching.assignment_service import GroupAssignmentService
from dadcircles.services.matching.lifecycle_service import GroupLifecycleService
from dadcircles.services.matching.chunking import (
    ChunkPolicy,
    drop_chunk_on_gap_failure,
    form_candidate_groups,
)

__all__ = [
    "MemberPoolService",
    "GroupAssignmentService",
    "GroupLifecycleService",
    "ChunkPolicy",
    "drop_chunk_on_gap_failure",
    "form_candidate_groups",
]
