"""Tests for the matching pass pipeline."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from bson.errors import InvalidId

from common.utils.exceptions import ConflictException
from dadcircles.models.group import LifeStage
from dadcircles.models.matching import MatchingConfig
from dadcircles.pipelines.matching import run_matching_pass
from dadcircles.services.matching.assignment_service import GroupAssignmentService
from dadcircles.services.matching.chunking import age_gap_months
from dadcircles.services.matching.life_stage import classify_member
from dadcircles.services.matching.member_pool_service import MemberPoolService
from dadcircles.models.member import Member


@pytest.fixture
def pool_service(mongo_db):
    return MemberPoolService(mongo_db)


@pytest.fixture
def assignment_service(mongo_db):
    return GroupAssignmentService(mongo_db)


@pytest.fixture
def seed(mongo_db, make_profile):
    async def _seed(ages, **kwargs):
        docs = [make_profile(age, **kwargs) for age in ages]
        await mongo_db["profiles"].insert_many(docs)
        return docs
    return _seed


@pytest.mark.asyncio
async def test_empty_pool(pool_service, assignment_service, today):
    result = await run_matching_pass(pool_service, assignment_service, today=today)

    assert result.groups_created == []
    assert result.summary == "No unmatched users found"


@pytest.mark.asyncio
async def test_full_pass_respects_group_invariants(pool_service, assignment_service, seed, mongo_db, today):
    await seed([1, 2, 3, 4, 2, 3])
    await seed([20 + i for i in range(10)])
    await seed([1, 2, 3, 4], city="Denver", state_code="CO")
    await seed([1, 2], city="Boise", state_code="ID")
    config = MatchingConfig()

    result = await run_matching_pass(pool_service, assignment_service, config, today=today)

    assert len(result.groups_created) == 4
    assert result.users_matched == 20
    assert result.users_unmatched == 2
    assert result.errors == []

    for group in result.groups_created:
        docs = await mongo_db["profiles"].find(
            {"_id": {"$in": [ObjectId(m) for m in group.member_ids]}}
        ).to_list(length=None)
        members = [Member.from_document(d) for d in docs]
        assert config.min_group_size <= len(members) <= config.max_group_size
        assert all(m.location == group.location for m in members)
        assert {classify_member(m, today) for m in members} == {group.life_stage}
        assert age_gap_months(members, group.life_stage, today) <= config.max_gap_for(group.life_stage)
        assert all(m.group_id == group.id for m in members)


@pytest.mark.asyncio
async def test_group_names_are_numbered_per_partition(pool_service, assignment_service, seed, today):
    await seed([20 + i for i in range(10)])

    result = await run_matching_pass(pool_service, assignment_service, today=today)

    assert [g.name for g in result.groups_created] == [
        "Austin Toddler Dads - Group 1",
        "Austin Toddler Dads - Group 2",
    ]
    assert all(g.life_stage == LifeStage.TODDLER for g in result.groups_created)


@pytest.mark.asyncio
async def test_second_pass_creates_nothing(pool_service, assignment_service, seed, mongo_db, today):
    await seed([1, 2, 3, 4, 4])
    await seed([20 + i for i in range(10)])

    first = await run_matching_pass(pool_service, assignment_service, today=today)
    second = await run_matching_pass(pool_service, assignment_service, today=today)

    assert len(first.groups_created) == 3
    assert second.groups_created == []
    assert await mongo_db["groups"].count_documents({}) == 3


@pytest.mark.asyncio
async def test_each_member_in_at_most_one_group(pool_service, assignment_service, seed, mongo_db, today):
    await seed([1, 1, 2, 2, 3, 3, 1, 2, 3, 3, 2, 1])

    await run_matching_pass(pool_service, assignment_service, today=today)
    await run_matching_pass(pool_service, assignment_service, today=today)

    groups = await mongo_db["groups"].find({}).to_list(length=None)
    member_ids = [m for g in groups for m in g["memberIds"]]
    assert len(member_ids) == len(set(member_ids))
    for group in groups:
        linked = await mongo_db["profiles"].count_documents({"groupId": group["_id"]})
        assert linked == len(group["memberIds"])


@pytest.mark.asyncio
async def test_location_filter_only_matches_that_location(pool_service, assignment_service, seed, today):
    await seed([1, 2, 3, 4])
    await seed([1, 2, 3, 4], city="Denver", state_code="CO")

    result = await run_matching_pass(
        pool_service, assignment_service, city="Denver", state_code="CO", today=today
    )

    assert [g.location.city for g in result.groups_created] == ["Denver"]


@pytest.mark.asyncio
async def test_newborns_with_one_infant_stay_unmatched(pool_service, assignment_service, seed, mongo_db, today):
    await seed([1, 2, 3, 8])

    result = await run_matching_pass(pool_service, assignment_service, today=today)

    assert result.groups_created == []
    assert result.users_unmatched == 4
    assert await mongo_db["profiles"].count_documents({"groupId": None}) == 4


@pytest.mark.asyncio
async def test_assignment_failure_is_recorded_and_pass_continues(make_member, today):
    members = [make_member(m) for m in (1, 2, 3, 4)] + [make_member(20 + i) for i in range(4)]
    pool_service = MagicMock()
    pool_service.get_unmatched_members = AsyncMock(return_value=members)

    created = MagicMock(member_ids=[m.id for m in members[4:]])
    assignment_service = MagicMock()
    assignment_service.assign_group = AsyncMock(side_effect=[
        ConflictException(message="One or more members were already assigned to a group",
                          code="MEMBERS_ALREADY_ASSIGNED"),
        created,
    ])

    result = await run_matching_pass(pool_service, assignment_service, today=today)

    assert result.groups_created == [created]
    assert result.users_matched == 4
    assert result.users_unmatched == 4
    assert len(result.errors) == 1
    assert "already assigned" in result.errors[0]
    assert "(1 errors)" in result.summary


@pytest.mark.asyncio
async def test_profiles_with_string_ids_do_not_stop_other_locations(
    pool_service, assignment_service, seed, mongo_db, make_profile, today
):
    await mongo_db["profiles"].insert_many([
        make_profile(age, city="Denver", state_code="CO", _id=f"session-{age}")
        for age in (1, 2, 3, 4)
    ])
    await seed([1, 2, 3, 4])

    result = await run_matching_pass(pool_service, assignment_service, today=today)

    assert [g.location.city for g in result.groups_created] == ["Austin"]
    assert result.errors == []
    assert await mongo_db["profiles"].count_documents(
        {"location.city": "Denver", "groupId": None}
    ) == 4


@pytest.mark.asyncio
async def test_profile_with_malformed_child_is_skipped(pool_service, assignment_service, seed, mongo_db, make_profile, today):
    await seed([1, 2, 3, 4])
    await mongo_db["profiles"].insert_one(make_profile(2, children=["2025-01"]))

    result = await run_matching_pass(pool_service, assignment_service, today=today)

    assert len(result.groups_created) == 1
    assert result.users_matched == 4
    assert result.users_unmatched == 0


@pytest.mark.asyncio
async def test_invalid_id_during_assignment_is_recorded(make_member, today):
    members = [make_member(m) for m in (1, 2, 3, 4)] + [make_member(20 + i) for i in range(4)]
    pool_service = MagicMock()
    pool_service.get_unmatched_members = AsyncMock(return_value=members)

    created = MagicMock(member_ids=[m.id for m in members[4:]])
    assignment_service = MagicMock()
    assignment_service.assign_group = AsyncMock(side_effect=[
        InvalidId("'session-1' is not a valid ObjectId"),
        created,
    ])

    result = await run_matching_pass(pool_service, assignment_service, today=today)

    assert result.groups_created == [created]
    assert len(result.errors) == 1
    assert "session-1" in result.errors[0]
