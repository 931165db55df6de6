from types import SimpleNamespace

import pytest

from dormhub.services.preference import (
    StudentPreference,
    find_matching_rooms,
    find_matching_students,
    preference_matches,
)


def pref(user_id=1, room_type=None, services=()):
    return StudentPreference.of(user_id, room_type, services)


@pytest.mark.parametrize(
    "room_type, room_services, preference, expected",
    [
        # type agreement
        ("shared", [1], pref(room_type="shared", services=[1]), True),
        ("single", [1], pref(room_type="shared", services=[1]), False),
        # unspecified room type only checks services
        (None, [1, 2], pref(room_type="single", services=[2]), True),
        # services must overlap when both sides declare them
        ("shared", [1, 2], pref(room_type="shared", services=[3]), False),
        # an empty side is not a wildcard
        ("shared", [1], pref(room_type="shared"), False),
        ("shared", [], pref(room_type="shared", services=[1]), False),
        # no services anywhere, types agree
        ("shared", [], pref(room_type="shared"), True),
        # student without any preference only matches typed rooms
        ("shared", [], pref(), True),
        (None, [], pref(), False),
    ],
)
def test_preference_predicate(room_type, room_services, preference, expected):
    assert preference_matches(room_type, room_services, preference) is expected


def test_find_matching_students_filters_by_predicate():
    preferences = [
        pref(1, "shared", [1]),
        pref(2, "single", [1]),
        pref(3, None, [1, 5]),
        pref(4, "shared", [7]),
    ]
    assert find_matching_students("shared", [1, 2], preferences) == [1, 3]


def test_find_matching_rooms_excludes_current_room():
    rooms = [
        SimpleNamespace(id=1, room_type="shared", service_ids=[1]),
        SimpleNamespace(id=2, room_type="shared", service_ids=[1, 2]),
        SimpleNamespace(id=3, room_type="single", service_ids=[1]),
    ]
    matched = find_matching_rooms(pref(room_type="shared", services=[1]), rooms, occupied_room_id=1)
    assert [room.id for room in matched] == [2]


def test_student_preference_normalizes_input():
    snapshot = StudentPreference.of(5, "", ["3", 3, 4])
    assert snapshot.room_type is None
    assert snapshot.service_ids == frozenset({3, 4})
