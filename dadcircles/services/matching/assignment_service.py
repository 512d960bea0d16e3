"""
Group assignment service.

Persists a new pending group and links its members to it.

Consistency model:
    With MATCHING_USE_TRANSACTIONS enabled (replica set / Atlas), the group
    insert and the member update run in one multi-document transaction.

    Without transactions the writes are ordered: the group is inserted first,
    then all members are linked with a single update_many that only touches
    members still unassigned. A crash between the two writes leaves a pending
    group with no linked members; its members stay in the unmatched pool, so
    the next matching pass picks them up again and the orphan can be deleted
    by an admin. If another writer claimed any member first, the partial link
    is reverted and the group removed, so no group is ever left half-assigned.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import ConflictException, ValidationException
from dadcircles.database.collections import GROUPS_COLLECTION, PROFILES_COLLECTION
from dadcircles.models.group import Group, GroupStatus, LifeStage
from dadcircles.models.matching import MatchingConfig
from dadcircles.models.member import Location, Member

logger = logging.getLogger(__name__)


class GroupAssignmentService:
    """
    Creates groups and assigns members to them.
    """

    def __init__(self, db: AsyncIOMotorDatabase, use_transactions: bool = False):
        """
        Initialize GroupAssignmentService.

        Args:
            db: MongoDB database connection
            use_transactions: Wrap each assignment in a multi-document transaction
        """
        self._db = db
        self._groups_collection = db[GROUPS_COLLECTION]
        self._profiles_collection = db[PROFILES_COLLECTION]
        self._use_transactions = use_transactions

    @staticmethod
    def build_group_name(location: Location, life_stage: LifeStage, sequence: int) -> str:
        """Human-readable group name, e.g. "Austin Newborn Dads - Group 2"."""
        return f"{location.city} {life_stage.value} Dads - Group {sequence}"

    async def assign_group(
        self,
        location: Location,
        life_stage: LifeStage,
        members: List[Member],
        sequence: int,
        config: Optional[MatchingConfig] = None,
    ) -> Group:
        """
        Create a pending group and link every member to it.

        Args:
            location: Location shared by all members
            life_stage: Life stage shared by all members
            members: Members of the new group
            sequence: Position of this group within its partition (1-based)
            config: Matching config providing the size bounds (defaults apply if omitted)

        Returns:
            The created Group

        Raises:
            ValidationException: If the member set breaks size or location rules
            ConflictException: If any member was assigned elsewhere first
        """
        config = config or MatchingConfig()
        if not config.min_group_size <= len(members) <= config.max_group_size:
            raise ValidationException(
                message=(
                    f"Group size must be between {config.min_group_size} and "
                    f"{config.max_group_size}, got {len(members)}"
                ),
                code="INVALID_GROUP_SIZE",
            )

        if any(m.location != location for m in members):
            raise ValidationException(
                message="All group members must share the group location",
                code="LOCATION_MISMATCH",
            )

        now = datetime.now(timezone.utc)
        group = Group(
            id=str(ObjectId()),
            name=self.build_group_name(location, life_stage, sequence),
            location=location,
            life_stage=life_stage,
            member_ids=[m.id for m in members],
            member_emails=[m.email for m in members if m.email],
            status=GroupStatus.PENDING,
            emailed_member_ids=[],
            created_at=now,
            updated_at=now,
        )

        if self._use_transactions:
            await self._assign_in_transaction(group, now)
        else:
            await self._assign_ordered(group, now)

        logger.info(f"Group {group.id} ({group.name}) created with {len(members)} members")
        return group

    def _member_filter(self, group: Group) -> dict:
        return {
            "_id": {"$in": [ObjectId(m) for m in group.member_ids]},
            "matchingEligible": True,
            "groupId": None,
        }

    def _link_update(self, group: Group, now: datetime) -> dict:
        return {"$set": {"groupId": ObjectId(group.id), "matchedAt": now, "updatedAt": now}}

    async def _assign_ordered(self, group: Group, now: datetime) -> None:
        await self._groups_collection.insert_one(group.to_document())

        result = await self._profiles_collection.update_many(
            self._member_filter(group),
            self._link_update(group, now),
        )

        if result.modified_count != len(group.member_ids):
            logger.warning(
                f"Group {group.id}: linked {result.modified_count} of "
                f"{len(group.member_ids)} members, rolling back"
            )
            await self._rollback(group)
            raise ConflictException(
                message="One or more members were already assigned to a group",
                code="MEMBERS_ALREADY_ASSIGNED",
                details={"groupId": group.id},
            )

    async def _assign_in_transaction(self, group: Group, now: datetime) -> None:
        async with await self._db.client.start_session() as session:
            async with session.start_transaction():
                await self._groups_collection.insert_one(group.to_document(), session=session)

                result = await self._profiles_collection.update_many(
                    self._member_filter(group),
                    self._link_update(group, now),
                    session=session,
                )

                # Raising inside the block aborts the transaction
                if result.modified_count != len(group.member_ids):
                    raise ConflictException(
                        message="One or more members were already assigned to a group",
                        code="MEMBERS_ALREADY_ASSIGNED",
                        details={"groupId": group.id},
                    )

    async def _rollback(self, group: Group) -> None:
        group_oid = ObjectId(group.id)
        await self._profiles_collection.update_many(
            {"_id": {"$in": [ObjectId(m) for m in group.member_ids]}, "groupId": group_oid},
            {"$set": {"groupId": None, "matchedAt": None, "updatedAt": datetime.now(timezone.utc)}},
        )
        await self._groups_collection.delete_one({"_id": group_oid})
