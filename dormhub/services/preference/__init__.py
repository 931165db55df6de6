from dormhub.services.preference.preference_matcher import (
    StudentPreference,
    find_matching_rooms,
    find_matching_students,
    preference_matches,
)
from dormhub.services.preference.preference_service import PreferenceService

__all__ = [
    "StudentPreference",
    "find_matching_rooms",
    "find_matching_students",
    "preference_matches",
    "PreferenceService",
]
