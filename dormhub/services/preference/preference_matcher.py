# dormhub/services/preference/preference_matcher.py
"""
Preference matcher.

Pure filtering of students and rooms by declared room type and service
preferences. Nothing here touches the database.

An empty service list on either side does not act as a wildcard when the
other side declared services, and a student with neither a room type nor
services only matches rooms carrying a type.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, FrozenSet, Iterable, List, Optional, Sequence

from dormhub.models.room import Room


@dataclass(frozen=True)
class StudentPreference:
    """Snapshot of one student's saved preferences."""

    user_id: int
    room_type: Optional[str] = None
    service_ids: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def of(cls, user_id: int, room_type: Optional[str], service_ids: Optional[Iterable[int]]):
        return cls(
            user_id=user_id,
            room_type=room_type or None,
            service_ids=frozenset(int(s) for s in (service_ids or ())),
        )


def preference_matches(
    room_type: Optional[str],
    room_service_ids: Collection[int],
    preference: StudentPreference,
) -> bool:
    if room_type and preference.room_type and preference.room_type != room_type:
        return False

    room_services = set(room_service_ids)
    wanted = preference.service_ids

    if room_services and wanted:
        if not room_services & wanted:
            return False
    elif room_services and not wanted:
        return False
    elif wanted and not room_services:
        return False

    if not room_type and not preference.room_type and not wanted:
        return False

    return True


def find_matching_students(
    room_type: Optional[str],
    service_ids: Collection[int],
    preferences: Iterable[StudentPreference],
) -> List[int]:
    """User ids of students whose preferences match the room description."""
    return [
        pref.user_id
        for pref in preferences
        if preference_matches(room_type, service_ids, pref)
    ]


def find_matching_rooms(
    preference: StudentPreference,
    candidate_rooms: Sequence[Room],
    occupied_room_id: Optional[int] = None,
) -> List[Room]:
    """Rooms matching ``preference``, minus the room the student occupies."""
    return [
        room
        for room in candidate_rooms
        if room.id != occupied_room_id
        and preference_matches(room.room_type, room.service_ids, preference)
    ]
