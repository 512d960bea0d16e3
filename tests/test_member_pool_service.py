"""Unit tests for MemberPoolService."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.utils.exceptions import ValidationException
from dadcircles.services.matching.member_pool_service import MemberPoolService


@pytest.fixture
def service(mock_db):
    return MemberPoolService(mock_db)


def _cursor(docs):
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.mark.asyncio
async def test_queries_eligible_unassigned_members(service, mock_collection, make_profile):
    docs = [make_profile(2), make_profile(3)]
    mock_collection.find.return_value = _cursor(docs)

    members = await service.get_unmatched_members()

    mock_collection.find.assert_called_once_with({"matchingEligible": True, "groupId": None})
    assert [m.id for m in members] == [str(d["_id"]) for d in docs]


@pytest.mark.asyncio
async def test_location_filter_adds_city_and_state(service, mock_collection):
    mock_collection.find.return_value = _cursor([])

    await service.get_unmatched_members(city="Austin", state_code="TX")

    mock_collection.find.assert_called_once_with({
        "matchingEligible": True,
        "groupId": None,
        "location.city": "Austin",
        "location.stateCode": "TX",
    })


@pytest.mark.asyncio
@pytest.mark.parametrize("city,state_code", [("Austin", None), (None, "TX")])
async def test_partial_location_filter_rejected(service, mock_collection, city, state_code):
    with pytest.raises(ValidationException) as exc_info:
        await service.get_unmatched_members(city=city, state_code=state_code)

    assert exc_info.value.code == "INCOMPLETE_LOCATION_FILTER"
    mock_collection.find.assert_not_called()


@pytest.mark.asyncio
async def test_malformed_profiles_are_skipped(service, mock_collection, make_profile):
    good = make_profile(2)
    bad = make_profile(2, children=[{"birthYear": "soon", "birthMonth": 3}])
    mock_collection.find.return_value = _cursor([bad, good])

    members = await service.get_unmatched_members()

    assert [m.id for m in members] == [str(good["_id"])]


@pytest.mark.asyncio
async def test_profiles_with_wrong_shapes_are_skipped(service, mock_collection, make_profile):
    good = make_profile(2)
    mock_collection.find.return_value = _cursor([
        make_profile(2, _id="session-1"),
        make_profile(2, children=["2025-01"]),
        make_profile(2, location="Austin, TX"),
        good,
    ])

    members = await service.get_unmatched_members()

    assert [m.id for m in members] == [str(good["_id"])]


@pytest.mark.asyncio
async def test_matching_stats(service, mock_collection):
    mock_collection.count_documents = AsyncMock(side_effect=[20, 15, 9])

    stats = await service.get_matching_stats()

    assert stats == {
        "totalUsers": 20,
        "eligibleUsers": 15,
        "matchedUsers": 9,
        "unmatchedUsers": 6,
    }


@pytest.mark.asyncio
async def test_stateful_pool_excludes_assigned_and_ineligible(mongo_db, make_profile):
    profiles = mongo_db["profiles"]
    waiting = make_profile(2)
    await profiles.insert_many([
        waiting,
        make_profile(2, group_id=ObjectId()),
        make_profile(2, eligible=False),
    ])

    members = await MemberPoolService(mongo_db).get_unmatched_members()

    assert [m.id for m in members] == [str(waiting["_id"])]
