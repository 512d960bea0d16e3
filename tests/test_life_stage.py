"""Unit tests for life-stage classification."""

import pytest
from bson import ObjectId
from pydantic import ValidationError

from dadcircles.models.group import LifeStage
from dadcircles.models.member import Child, Member
from dadcircles.services.matching.life_stage import (
    age_in_months,
    classify_child,
    classify_member,
    describe_child,
    is_expecting,
)


def child_aged(today, months):
    total = today.year * 12 + (today.month - 1) - months
    return Child(birth_year=total // 12, birth_month=total % 12 + 1)


# ─────────────────────────────────────────────────────────────────
# classify_child
# ─────────────────────────────────────────────────────────────────


@pytest.mark.parametrize("months,expected", [
    (0, LifeStage.NEWBORN),
    (6, LifeStage.NEWBORN),
    (7, LifeStage.INFANT),
    (18, LifeStage.INFANT),
    (19, LifeStage.TODDLER),
    (36, LifeStage.TODDLER),
    (37, None),
    (120, None),
])
def test_classify_child_boundaries(today, months, expected):
    assert classify_child(child_aged(today, months), today) == expected


def test_future_month_same_year_is_expecting(today):
    child = Child(birth_year=today.year, birth_month=today.month + 1)

    assert is_expecting(child, today)
    assert classify_child(child, today) == LifeStage.EXPECTING


def test_future_year_is_expecting(today):
    child = Child(birth_year=today.year + 1, birth_month=1)

    assert classify_child(child, today) == LifeStage.EXPECTING


def test_current_month_is_newborn_not_expecting(today):
    child = Child(birth_year=today.year, birth_month=today.month)

    assert not is_expecting(child, today)
    assert classify_child(child, today) == LifeStage.NEWBORN


def test_missing_birth_month_treated_as_january(today):
    child = Child(birth_year=today.year, birth_month=None)

    assert age_in_months(child, today) == today.month - 1
    assert classify_child(child, today) == LifeStage.NEWBORN


def test_missing_birth_month_next_year_is_expecting(today):
    child = Child(birth_year=today.year + 1)

    assert classify_child(child, today) == LifeStage.EXPECTING


# ─────────────────────────────────────────────────────────────────
# classify_member
# ─────────────────────────────────────────────────────────────────


def test_classify_member_uses_first_child_only(today):
    member = Member(
        id=str(ObjectId()),
        children=[child_aged(today, 3), child_aged(today, 30)],
        eligible=True,
    )

    assert classify_member(member, today) == LifeStage.NEWBORN


def test_classify_member_without_children_has_no_stage(today):
    member = Member(id=str(ObjectId()), children=[], eligible=True)

    assert classify_member(member, today) is None


# ─────────────────────────────────────────────────────────────────
# Record validation
# ─────────────────────────────────────────────────────────────────


def test_child_rejects_month_out_of_range():
    with pytest.raises(ValidationError):
        Child(birth_year=2025, birth_month=13)


def test_member_document_with_missing_birth_year_is_rejected(make_profile):
    doc = make_profile(children=[{"birthMonth": 4}])

    with pytest.raises(ValidationError):
        Member.from_document(doc)


def test_member_document_with_string_id_is_rejected(make_profile):
    doc = make_profile(_id="session-1")

    with pytest.raises(ValidationError):
        Member.from_document(doc)


def test_member_document_accepts_object_id_string(make_profile):
    oid = ObjectId()
    doc = make_profile(_id=str(oid))

    assert Member.from_document(doc).id == str(oid)


def test_member_document_with_non_object_child_is_rejected(make_profile):
    doc = make_profile(children=["2025-01"])

    with pytest.raises(ValidationError):
        Member.from_document(doc)


def test_member_document_with_string_location_is_rejected(make_profile):
    doc = make_profile(location="Austin, TX")

    with pytest.raises(ValidationError):
        Member.from_document(doc)


def test_member_document_with_partial_location_has_no_location(make_profile):
    doc = make_profile(location={"city": "Austin"})

    assert Member.from_document(doc).location is None


# ─────────────────────────────────────────────────────────────────
# describe_child
# ─────────────────────────────────────────────────────────────────


def test_describe_expecting_child(today):
    child = Child(birth_year=today.year, birth_month=9)

    assert describe_child(child, today) == f"Expecting 9/{today.year}"


@pytest.mark.parametrize("months,expected", [
    (4, "4mo old"),
    (11, "11mo old"),
    (15, "1y 3mo old"),
    (24, "2y old"),
    (36, "3y old"),
    (50, "4y old"),
])
def test_describe_child_age(today, months, expected):
    assert describe_child(child_aged(today, months), today) == expected
