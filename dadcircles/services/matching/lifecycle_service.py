"""
Group lifecycle management.

Moves groups out of ``pending``:

    approve: pending -> active, then introduction emails go out
    delete:  pending -> inactive, members are released, the record is removed

Both transitions are compare-and-swap updates on ``status``, so two admins
acting on the same group cannot both win.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, List, Dict, Any

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from pydantic import ValidationError

from config.email_config import INTRODUCTION_SEND_TIMEOUT_SECONDS
from common.utils.exceptions import ConflictException, NotFoundException, ValidationException
from dadcircles.database.collections import GROUPS_COLLECTION, PROFILES_COLLECTION
from dadcircles.models.group import Group, GroupStatus
from dadcircles.models.matching import ApprovalResult, DeletionResult
from dadcircles.models.member import Member
from dadcircles.services.email.email_service import EmailService
from dadcircles.services.matching.life_stage import describe_child

logger = logging.getLogger(__name__)


def _to_object_id(group_id: str) -> ObjectId:
    try:
        return ObjectId(group_id)
    except (InvalidId, TypeError):
        raise NotFoundException(message="Group not found", code="GROUP_NOT_FOUND")


class GroupLifecycleService:
    """
    Reads, approves and deletes groups.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        email_service: EmailService,
        send_timeout: float = INTRODUCTION_SEND_TIMEOUT_SECONDS,
    ):
        """
        Initialize GroupLifecycleService.

        Args:
            db: MongoDB database connection
            email_service: Sender for introduction emails
            send_timeout: Per-recipient introduction timeout in seconds
        """
        self._db = db
        self._groups_collection = db[GROUPS_COLLECTION]
        self._profiles_collection = db[PROFILES_COLLECTION]
        self._email_service = email_service
        self._send_timeout = send_timeout

    async def get_group(self, group_id: str) -> Group:
        """
        Get a group by ID.

        Raises:
            NotFoundException: If the id is malformed or no such group exists
        """
        doc = await self._groups_collection.find_one({"_id": _to_object_id(group_id)})
        if not doc:
            raise NotFoundException(message="Group not found", code="GROUP_NOT_FOUND")
        return Group.from_document(doc)

    async def list_groups(
        self,
        status: Optional[GroupStatus] = None,
        city: Optional[str] = None,
        state_code: Optional[str] = None,
    ) -> List[Group]:
        """
        List groups, newest first.

        Args:
            status: Only groups in this status
            city: Only groups in this city (requires state_code)
            state_code: Only groups in this state/region (requires city)
        """
        if bool(city) != bool(state_code):
            raise ValidationException(
                message="city and stateCode must be provided together",
                code="INCOMPLETE_LOCATION_FILTER",
            )

        query: Dict[str, Any] = {}
        if status:
            query["status"] = GroupStatus(status).value
        if city and state_code:
            query["location.city"] = city
            query["location.stateCode"] = state_code

        docs = await self._groups_collection.find(query, sort=[("createdAt", -1)]).to_list(length=None)
        return [Group.from_document(doc) for doc in docs]

    async def approve_group(self, group_id: str, today: Optional[date] = None) -> ApprovalResult:
        """
        Approve a pending group and send introductions.

        The status flip happens before any email goes out. Delivery failures
        for individual members are reported in the result, never raised; the
        group stays active either way. If member profiles cannot be read after
        the flip, no emails are sent but ``introductionSentAt`` is still
        recorded with an empty ``emailedMemberIds``.

        Args:
            group_id: Group ID
            today: Reference date for child summaries (defaults to today, UTC)

        Returns:
            ApprovalResult with the updated group and per-member delivery outcome

        Raises:
            NotFoundException: If the group does not exist
            ConflictException: If the group is not pending, or another
                request approved/deleted it first
        """
        group = await self.get_group(group_id)
        if group.status != GroupStatus.PENDING:
            raise ConflictException(
                message=f"Group is {group.status.value}, only pending groups can be approved",
                code="GROUP_NOT_PENDING",
            )

        now = datetime.now(timezone.utc)
        doc = await self._groups_collection.find_one_and_update(
            {"_id": ObjectId(group.id), "status": GroupStatus.PENDING.value},
            {"$set": {"status": GroupStatus.ACTIVE.value, "updatedAt": now}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise ConflictException(
                message="Group is no longer pending",
                code="GROUP_NOT_PENDING",
            )
        group = Group.from_document(doc)
        logger.info(f"Group {group.id} approved")

        try:
            recipients = await self._build_recipients(group, today or datetime.now(timezone.utc).date())
        except PyMongoError as e:
            logger.error(f"Group {group.id}: could not load member profiles for introductions: {e}")
            recipients = []

        emailed = []
        if recipients:
            emailed = await self._email_service.send_group_introduction_emails(
                group_name=group.name,
                recipients=recipients,
                timeout=self._send_timeout,
            )

        sent_at = datetime.now(timezone.utc)
        doc = await self._groups_collection.find_one_and_update(
            {"_id": ObjectId(group.id)},
            {"$set": {
                "emailedMemberIds": [ObjectId(m) for m in emailed],
                "introductionSentAt": sent_at,
                "updatedAt": sent_at,
            }},
            return_document=ReturnDocument.AFTER,
        )
        group = Group.from_document(doc)

        failed = [m for m in group.member_ids if m not in set(emailed)]
        if failed:
            logger.warning(f"Group {group.id}: introductions not delivered to {len(failed)} members")

        return ApprovalResult(
            group=group,
            emailed_member_ids=list(emailed),
            failed_member_ids=failed,
            message=f"Group approved; introductions sent to {len(emailed)} of {len(group.member_ids)} members",
        )

    async def delete_group(self, group_id: str) -> DeletionResult:
        """
        Reject a group: release its members and remove the record.

        Members whose profile no longer exists are logged and skipped.

        Raises:
            NotFoundException: If the group does not exist
            ConflictException: If the group is active, or was approved meanwhile
        """
        group = await self.get_group(group_id)
        if group.status == GroupStatus.ACTIVE:
            raise ConflictException(
                message="Active groups cannot be deleted",
                code="GROUP_ACTIVE",
            )

        group_oid = ObjectId(group.id)
        now = datetime.now(timezone.utc)
        doc = await self._groups_collection.find_one_and_update(
            {
                "_id": group_oid,
                "status": {"$in": [GroupStatus.PENDING.value, GroupStatus.INACTIVE.value]},
            },
            {"$set": {"status": GroupStatus.INACTIVE.value, "updatedAt": now}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise ConflictException(
                message="Group was approved or removed by another request",
                code="GROUP_ACTIVE",
            )

        member_oids = [ObjectId(m) for m in group.member_ids]
        existing = await self._profiles_collection.find(
            {"_id": {"$in": member_oids}},
            {"_id": 1},
        ).to_list(length=None)
        existing_ids = {str(d["_id"]) for d in existing}

        missing = [m for m in group.member_ids if m not in existing_ids]
        for member_id in missing:
            logger.warning(f"Group {group.id}: member profile {member_id} not found, skipping")

        released = [m for m in group.member_ids if m in existing_ids]
        if released:
            result = await self._profiles_collection.update_many(
                {"_id": {"$in": [ObjectId(m) for m in released]}, "groupId": group_oid},
                {"$set": {"groupId": None, "matchedAt": None, "updatedAt": now}},
            )
            if result.modified_count != len(released):
                logger.warning(
                    f"Group {group.id}: released {result.modified_count} of {len(released)} members; "
                    f"the rest were not linked to this group"
                )

        await self._groups_collection.delete_one({"_id": group_oid})
        logger.info(f"Group {group.id} deleted, {len(released)} members returned to the pool")

        return DeletionResult(
            group_id=group.id,
            released_member_ids=released,
            missing_member_ids=missing,
            message=f"Group deleted; {len(released)} members returned to the unmatched pool",
        )

    async def _build_recipients(self, group: Group, today: date) -> List[Dict[str, str]]:
        docs = await self._profiles_collection.find(
            {"_id": {"$in": [ObjectId(m) for m in group.member_ids]}}
        ).to_list(length=None)

        recipients = []
        for doc in docs:
            try:
                member = Member.from_document(doc)
            except ValidationError:
                logger.warning(f"Group {group.id}: profile {doc.get('_id')} is malformed, skipping introduction")
                continue

            if not member.email:
                logger.warning(f"Group {group.id}: member {member.id} has no email, skipping introduction")
                continue

            child = member.primary_child
            recipients.append({
                "memberId": member.id,
                "name": member.display_name,
                "email": member.email,
                "childSummary": describe_child(child, today) if child else "",
            })

        found = {str(d["_id"]) for d in docs}
        for member_id in group.member_ids:
            if member_id not in found:
                logger.warning(f"Group {group.id}: member profile {member_id} not found")

        return recipients
