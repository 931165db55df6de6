# dormhub/services/preference/preference_service.py
"""
Student room preferences: read, upsert and the student-side match query.
"""
from __future__ import annotations

import logging
from typing import Callable, Collection, List, Optional

from sqlalchemy.orm import Session

from dormhub.models.preference import Preference
from dormhub.repositories import PreferenceRepository, ServiceRepository, UserRepository
from dormhub.schemas.preference import PreferenceResponse, PreferenceUpdate
from dormhub.services.common import UnitOfWork, errors
from dormhub.services.common.permissions import Principal, require_student
from dormhub.services.preference.preference_matcher import StudentPreference, find_matching_students

logger = logging.getLogger(__name__)


def load_student_preferences(uow: UnitOfWork) -> List[StudentPreference]:
    """Preferences of active student accounts that saved any."""
    users = uow.get_repo(UserRepository).list_active_students_with_preferences()
    return [
        StudentPreference.of(user.id, user.preference.room_type, user.preference.preferred_services)
        for user in users
        if user.preference is not None
    ]


def load_preference(uow: UnitOfWork, user_id: int) -> Optional[StudentPreference]:
    pref = uow.get_repo(PreferenceRepository).get_by_user(user_id)
    if pref is None:
        return None
    return StudentPreference.of(user_id, pref.room_type, pref.preferred_services)


class PreferenceService:

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get_preferences(self, actor: Principal) -> PreferenceResponse:
        """Stored preferences, or empty defaults when none were saved."""
        require_student(actor)
        with UnitOfWork(self._session_factory) as uow:
            pref = uow.get_repo(PreferenceRepository).get_by_user(actor.user_id)
            if pref is None:
                return PreferenceResponse(user_id=actor.user_id)
            return PreferenceResponse.model_validate(pref)

    def update_preferences(self, actor: Principal, data: PreferenceUpdate) -> PreferenceResponse:
        require_student(actor)
        changes = data.model_dump(exclude_unset=True)

        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(PreferenceRepository)

            if changes.get("preferred_services"):
                requested = changes["preferred_services"]
                known = set(uow.get_repo(ServiceRepository).existing_ids(requested))
                unknown = [sid for sid in requested if sid not in known]
                if unknown:
                    raise errors.ValidationError(
                        "Unknown service ids in preferences",
                        field="preferred_services",
                        details={"unknown_ids": unknown},
                    )

            pref = repo.get_by_user(actor.user_id)
            if pref is None:
                pref = repo.create(Preference(user_id=actor.user_id, room_type=None, preferred_services=[]))

            if "room_type" in changes:
                room_type = changes["room_type"]
                pref.room_type = room_type.value if room_type is not None else None
            if "preferred_services" in changes:
                pref.preferred_services = list(changes["preferred_services"] or [])

            uow.flush()
            logger.info("Updated preferences for user %s", actor.user_id)
            return PreferenceResponse.model_validate(pref)

    def find_matching_students(self, room_type: Optional[str], service_ids: Collection[int]) -> List[int]:
        """User ids of students whose saved preferences match a room."""
        with UnitOfWork(self._session_factory) as uow:
            return find_matching_students(room_type, service_ids, load_student_preferences(uow))
