"""
Unmatched member pool.

Read-only queries over the profiles collection: who is eligible and not yet
in a group, plus headline matching counts.
"""

import logging
from typing import Optional, List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError

from common.utils.exceptions import ValidationException
from dadcircles.database.collections import PROFILES_COLLECTION
from dadcircles.models.member import Member

logger = logging.getLogger(__name__)


class MemberPoolService:
    """
    Reads the pool of members waiting for a group.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize MemberPoolService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._profiles_collection = db[PROFILES_COLLECTION]

    async def get_unmatched_members(
        self,
        city: Optional[str] = None,
        state_code: Optional[str] = None,
    ) -> List[Member]:
        """
        Get eligible members that are not in a group.

        Args:
            city: Restrict to this city (requires state_code)
            state_code: Restrict to this state/region code (requires city)

        Returns:
            List of members. Documents that fail validation are logged and skipped.

        Raises:
            ValidationException: If only one of city/state_code is given
        """
        if bool(city) != bool(state_code):
            raise ValidationException(
                message="city and stateCode must be provided together",
                code="INCOMPLETE_LOCATION_FILTER",
            )

        query: Dict[str, Any] = {"matchingEligible": True, "groupId": None}
        if city and state_code:
            query["location.city"] = city
            query["location.stateCode"] = state_code

        docs = await self._profiles_collection.find(query).to_list(length=None)

        members = []
        for doc in docs:
            try:
                members.append(Member.from_document(doc))
            except ValidationError as e:
                logger.warning(f"Skipping malformed profile {doc.get('_id')}: {e.error_count()} validation errors")

        logger.debug(f"Loaded {len(members)} unmatched members (city={city}, state={state_code})")
        return members

    async def get_matching_stats(self) -> Dict[str, int]:
        """Get total, eligible, matched and unmatched member counts."""
        total = await self._profiles_collection.count_documents({})
        eligible = await self._profiles_collection.count_documents({"matchingEligible": True})
        matched = await self._profiles_collection.count_documents(
            {"matchingEligible": True, "groupId": {"$ne": None}}
        )

        return {
            "totalUsers": total,
            "eligibleUsers": eligible,
            "matchedUsers": matched,
            "unmatchedUsers": eligible - matched,
        }
