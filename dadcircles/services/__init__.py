"""
DadCircles Services.

All service classes organized by feature.
"""

# Matching services
from dadcircles.services.matching.member_pool_service import MemberPoolService
from dadcircles.services.matching.assignment_service import GroupAssignmentService
from dadcircles.services.matching.lifecycle_service import GroupLifecycleService

# Email services
from dadcircles.services.email.email_service import EmailService

__all__ = [
    "MemberPoolService",
    "GroupAssignmentService",
    "GroupLifecycleService",
    "EmailService",
]
