"""
Partitions the unmatched pool by location, then by life stage.
"""

from datetime import date
from typing import Dict, Iterable, List

from dadcircles.models.group import LifeStage
from dadcircles.models.member import Location, Member
from dadcircles.services.matching.life_stage import classify_member

LOCATION_KEY_SEPARATOR = "|"

Partitions = Dict[str, Dict[LifeStage, List[Member]]]


def location_key(location: Location) -> str:
    return f"{location.city}{LOCATION_KEY_SEPARATOR}{location.state_code}"


def split_location_key(key: str) -> Location:
    city, _, state_code = key.rpartition(LOCATION_KEY_SEPARATOR)
    return Location(city=city, state_code=state_code)


def partition_members(members: Iterable[Member], today: date) -> Partitions:
    """
    Build ``{"City|ST": {LifeStage: [members]}}``.

    Members without a location or without a classifiable first child are
    left out. Input order is preserved within each partition.
    """
    partitions: Partitions = {}

    for member in members:
        if member.location is None:
            continue

        stage = classify_member(member, today)
        if stage is None:
            continue

        by_stage = partitions.setdefault(location_key(member.location), {})
        by_stage.setdefault(stage, []).append(member)

    return partitions
