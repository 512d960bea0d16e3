"""Shared test fixtures for DadCircles matching tests."""

import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient

from dadcircles.models.member import Member


TODAY = date(2026, 6, 15)


def birth_month_for(age_months: int, today: date = TODAY):
    """(year, month) of a child who is ``age_months`` old; negative means due."""
    total = today.year * 12 + (today.month - 1) - age_months
    return total // 12, total % 12 + 1


def profile_doc(
    age_months: int = 2,
    city: str = "Austin",
    state_code: str = "TX",
    email: str = None,
    eligible: bool = True,
    group_id=None,
    **extra,
) -> dict:
    """A profiles document with one child of the given age."""
    _id = extra.pop("_id", None) or ObjectId()
    year, month = birth_month_for(age_months)
    doc = {
        "_id": _id,
        "email": email if email is not None else f"dad{str(_id)[-6:]}@example.com",
        "location": {"city": city, "stateCode": state_code},
        "children": [{"birthYear": year, "birthMonth": month}],
        "matchingEligible": eligible,
        "groupId": group_id,
        "matchedAt": None,
    }
    doc.update(extra)
    return doc


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_profile():
    return profile_doc


@pytest.fixture
def make_member():
    def _make(age_months: int = 2, **kwargs) -> Member:
        return Member.from_document(profile_doc(age_months, **kwargs))
    return _make


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # count_documents etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def mongo_db():
    """In-memory Motor-compatible database."""
    client = AsyncMongoMockClient()
    return client["dadcircles_test"]


@pytest.fixture
def mock_email_service():
    """Email service that delivers to every recipient."""
    service = MagicMock()
    service.send_group_introduction_emails = AsyncMock(
        side_effect=lambda group_name, recipients, timeout: [r["memberId"] for r in recipients]
    )
    return service
