"""
Life-stage classification.

Buckets a child by age (or due date) relative to a reference date:

    due date in the future   -> Expecting
    0..6 months              -> Newborn
    7..18 months             -> Infant
    19..36 months            -> Toddler
    older                    -> None (aged out)

Only year and month are compared. A child without a birth month is treated
as born (or due) in January of its birth year.
"""

from datetime import date
from typing import Optional

from dadcircles.models.group import LifeStage
from dadcircles.models.member import Child, Member

NEWBORN_MAX_MONTHS = 6
INFANT_MAX_MONTHS = 18
TODDLER_MAX_MONTHS = 36


def _birth_month(child: Child) -> int:
    return child.birth_month or 1


def is_expecting(child: Child, today: date) -> bool:
    """True when the child's birth/due month is strictly after today's month."""
    if child.birth_year > today.year:
        return True
    return child.birth_year == today.year and _birth_month(child) > today.month


def age_in_months(child: Child, today: date) -> int:
    """Whole months between the birth month and today's month (negative if due)."""
    return (today.year - child.birth_year) * 12 + (today.month - _birth_month(child))


def classify_child(child: Child, today: date) -> Optional[LifeStage]:
    if is_expecting(child, today):
        return LifeStage.EXPECTING

    months = age_in_months(child, today)
    if months <= NEWBORN_MAX_MONTHS:
        return LifeStage.NEWBORN
    if months <= INFANT_MAX_MONTHS:
        return LifeStage.INFANT
    if months <= TODDLER_MAX_MONTHS:
        return LifeStage.TODDLER
    return None


def classify_member(member: Member, today: date) -> Optional[LifeStage]:
    """Classify a member by their first child; members without children have no stage."""
    child = member.primary_child
    if child is None:
        return None
    return classify_child(child, today)


def describe_child(child: Child, today: date) -> str:
    """
    One-line child summary for group introductions.

    Examples: "Expecting 5/2027", "4mo old", "1y 3mo old", "3y old".
    """
    if is_expecting(child, today):
        if child.birth_month:
            return f"Expecting {child.birth_month}/{child.birth_year}"
        return f"Expecting {child.birth_year}"

    months = age_in_months(child, today)
    if months < 12:
        return f"{months}mo old"
    if months % 12 and months <= TODDLER_MAX_MONTHS:
        return f"{months // 12}y {months % 12}mo old"
    return f"{months // 12}y old"
