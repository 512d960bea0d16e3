"""Unit tests for GroupAssignmentService."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.utils.exceptions import ConflictException, ValidationException
from dadcircles.models.group import GroupStatus, LifeStage
from dadcircles.models.member import Location, Member
from dadcircles.services.matching.assignment_service import GroupAssignmentService


AUSTIN = Location(city="Austin", state_code="TX")


async def _seed(db, docs):
    await db["profiles"].insert_many(docs)
    return [Member.from_document(d) for d in docs]


# ─────────────────────────────────────────────────────────────────
# Mocked collection
# ─────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_group_inserted_before_members_linked(mock_db, mock_collection, make_member):
    calls = []
    mock_collection.insert_one = AsyncMock(side_effect=lambda doc: calls.append("insert"))
    mock_collection.update_many = AsyncMock(
        side_effect=lambda *a, **k: calls.append("update") or MagicMock(modified_count=4)
    )
    members = [make_member(m) for m in (1, 2, 3, 4)]

    group = await GroupAssignmentService(mock_db).assign_group(AUSTIN, LifeStage.NEWBORN, members, 1)

    assert calls == ["insert", "update"]
    inserted = mock_collection.insert_one.call_args.args[0]
    assert inserted["status"] == "pending"
    assert inserted["memberIds"] == [ObjectId(m.id) for m in members]
    query, update = mock_collection.update_many.call_args.args
    assert query["groupId"] is None
    assert update["$set"]["groupId"] == ObjectId(group.id)


@pytest.mark.asyncio
async def test_size_out_of_bounds_rejected(mock_db, mock_collection, make_member):
    members = [make_member(m) for m in (1, 2, 3)]

    with pytest.raises(ValidationException) as exc_info:
        await GroupAssignmentService(mock_db).assign_group(AUSTIN, LifeStage.NEWBORN, members, 1)

    assert exc_info.value.code == "INVALID_GROUP_SIZE"
    mock_collection.insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_mixed_locations_rejected(mock_db, mock_collection, make_member):
    members = [make_member(m) for m in (1, 2, 3)] + [make_member(4, city="Denver", state_code="CO")]

    with pytest.raises(ValidationException) as exc_info:
        await GroupAssignmentService(mock_db).assign_group(AUSTIN, LifeStage.NEWBORN, members, 1)

    assert exc_info.value.code == "LOCATION_MISMATCH"


def test_group_name():
    assert GroupAssignmentService.build_group_name(AUSTIN, LifeStage.INFANT, 3) == "Austin Infant Dads - Group 3"


# ─────────────────────────────────────────────────────────────────
# Stateful
# ─────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_assign_links_every_member(mongo_db, make_profile):
    docs = [make_profile(m, email=f"dad{m}@example.com") for m in (1, 2, 3, 4)]
    members = await _seed(mongo_db, docs)

    group = await GroupAssignmentService(mongo_db).assign_group(AUSTIN, LifeStage.NEWBORN, members, 2)

    stored = await mongo_db["groups"].find_one({"_id": ObjectId(group.id)})
    assert stored["name"] == "Austin Newborn Dads - Group 2"
    assert stored["status"] == GroupStatus.PENDING.value
    assert stored["lifeStage"] == "Newborn"
    assert stored["memberEmails"] == [f"dad{m}@example.com" for m in (1, 2, 3, 4)]

    linked = await mongo_db["profiles"].count_documents({"groupId": ObjectId(group.id)})
    assert linked == 4
    profile = await mongo_db["profiles"].find_one({"_id": docs[0]["_id"]})
    assert profile["matchedAt"] is not None


@pytest.mark.asyncio
async def test_conflicting_member_rolls_back(mongo_db, make_profile):
    other_group = ObjectId()
    docs = [make_profile(m) for m in (1, 2, 3, 4)]
    members = await _seed(mongo_db, docs)
    # Claimed by someone else after the pool was read
    await mongo_db["profiles"].update_one({"_id": docs[3]["_id"]}, {"$set": {"groupId": other_group}})

    with pytest.raises(ConflictException) as exc_info:
        await GroupAssignmentService(mongo_db).assign_group(AUSTIN, LifeStage.NEWBORN, members, 1)

    assert exc_info.value.code == "MEMBERS_ALREADY_ASSIGNED"
    assert await mongo_db["groups"].count_documents({}) == 0
    assert await mongo_db["profiles"].count_documents({"groupId": None}) == 3
    claimed = await mongo_db["profiles"].find_one({"_id": docs[3]["_id"]})
    assert claimed["groupId"] == other_group
