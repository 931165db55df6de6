# dormhub/services/room/room_query_service.py
"""
Read side of rooms, assignments and room requests.
"""
from __future__ import annotations

import logging
from typing import Callable, List

from sqlalchemy.orm import Session

from dormhub.models.room import Room
from dormhub.models.room_assignment import RoomAssignment
from dormhub.models.room_request import RoomRequest
from dormhub.repositories import RoomAssignmentRepository, RoomRepository, RoomRequestRepository
from dormhub.schemas.allocation import AssignmentDetailResponse, RoomRequestResponse
from dormhub.schemas.common.enums import RoomRequestStatus, RoomStatus
from dormhub.schemas.common.pagination import PaginatedResponse, PaginationParams
from dormhub.schemas.room import (
    MatchingRoomResponse,
    OccupantResponse,
    PendingRequestBrief,
    RoomDetailResponse,
    RoomFilterParams,
    RoomResponse,
)
from dormhub.services.common import UnitOfWork, errors
from dormhub.services.common.lookups import get_acting_student, get_student
from dormhub.services.common.mapping import to_schema, to_schema_list
from dormhub.services.common.pagination import paginate
from dormhub.services.common.permissions import Principal, require_admin, require_student
from dormhub.services.preference.preference_matcher import StudentPreference, find_matching_rooms
from dormhub.services.preference.preference_service import load_preference

logger = logging.getLogger(__name__)

# Rooms a student may still move into
REQUESTABLE_STATUSES = [RoomStatus.AVAILABLE.value, RoomStatus.OCCUPIED.value]


def build_assignment_detail(assignment: RoomAssignment) -> AssignmentDetailResponse:
    return to_schema(assignment, AssignmentDetailResponse)


def build_room_detail(room: Room, occupants: List[RoomAssignment], pending: List[RoomRequest]) -> RoomDetailResponse:
    return to_schema(
        room,
        RoomDetailResponse,
        occupants=to_schema_list(occupants, OccupantResponse),
        pending_requests=to_schema_list(pending, PendingRequestBrief),
    )


class RoomQueryService:

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    # ------------------------------------------------------------------ #
    # Rooms
    # ------------------------------------------------------------------ #

    def list_rooms(
        self,
        actor: Principal,
        filters: RoomFilterParams,
        params: PaginationParams,
    ) -> PaginatedResponse[RoomResponse]:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(RoomRepository)
            stmt = repo.search_stmt(
                status=filters.status.value if filters.status else None,
                building_id=filters.building_id,
                floor=filters.floor,
                room_type=filters.room_type.value if filters.room_type else None,
            )
            items, total = repo.paginate(stmt, page=params.page, page_size=params.page_size)
            return paginate(items=items, total_items=total, params=params, mapper=RoomResponse.model_validate)

    def get_room(self, actor: Principal, room_id: int) -> RoomDetailResponse:
        """Room with active occupants (student and payment) and pending requests."""
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            room = uow.get_repo(RoomRepository).get_with_details(room_id)
            if room is None:
                raise errors.NotFoundError("Room", room_id)
            occupants = uow.get_repo(RoomAssignmentRepository).list_for_room(room_id)
            pending = uow.get_repo(RoomRequestRepository).list_pending_for_room(room_id)
            return build_room_detail(room, occupants, pending)

    def get_room_occupants(
        self,
        actor: Principal,
        room_id: int,
        include_inactive: bool = False,
    ) -> List[OccupantResponse]:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            if uow.get_repo(RoomRepository).get(room_id) is None:
                raise errors.NotFoundError("Room", room_id)
            occupants = uow.get_repo(RoomAssignmentRepository).list_for_room(
                room_id, include_inactive=include_inactive
            )
            return to_schema_list(occupants, OccupantResponse)

    # ------------------------------------------------------------------ #
    # Assignments
    # ------------------------------------------------------------------ #

    def get_student_room(self, actor: Principal, student_id: int) -> AssignmentDetailResponse:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            get_student(uow, student_id)
            return self._active_assignment(uow, student_id)

    def get_my_room(self, actor: Principal) -> AssignmentDetailResponse:
        with UnitOfWork(self._session_factory) as uow:
            student = get_acting_student(uow, actor)
            return self._active_assignment(uow, student.id)

    @staticmethod
    def _active_assignment(uow: UnitOfWork, student_id: int) -> AssignmentDetailResponse:
        assignment = uow.get_repo(RoomAssignmentRepository).get_active_with_details(student_id)
        if assignment is None:
            raise errors.NotFoundError(
                "Assignment",
                student_id,
                message=f"Student {student_id} is not assigned to any room",
            )
        return build_assignment_detail(assignment)

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def list_student_requests(
        self,
        actor: Principal,
        params: PaginationParams,
    ) -> PaginatedResponse[RoomRequestResponse]:
        require_student(actor)
        with UnitOfWork(self._session_factory) as uow:
            student = get_acting_student(uow, actor)
            repo = uow.get_repo(RoomRequestRepository)
            items, total = repo.paginate(
                repo.for_student_stmt(student.id), page=params.page, page_size=params.page_size
            )
            return paginate(
                items=items,
                total_items=total,
                params=params,
                mapper=RoomRequestResponse.model_validate,
            )

    def list_room_requests(
        self,
        actor: Principal,
        room_id: int,
        params: PaginationParams,
    ) -> PaginatedResponse[RoomRequestResponse]:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            if uow.get_repo(RoomRepository).get(room_id) is None:
                raise errors.NotFoundError("Room", room_id)
            repo = uow.get_repo(RoomRequestRepository)
            items, total = repo.paginate(
                repo.for_room_stmt(room_id), page=params.page, page_size=params.page_size
            )
            return paginate(
                items=items,
                total_items=total,
                params=params,
                mapper=RoomRequestResponse.model_validate,
            )

    def get_matching_rooms(
        self,
        actor: Principal,
        params: PaginationParams,
    ) -> PaginatedResponse[MatchingRoomResponse]:
        """
        Rooms matching the student's saved preferences.

        Only rooms with a free bed are candidates and the student's current
        room is left out. Each room carries the student's latest request
        status for it.
        """
        require_student(actor)
        with UnitOfWork(self._session_factory) as uow:
            student = get_acting_student(uow, actor)
            preference = load_preference(uow, actor.user_id) or StudentPreference(user_id=actor.user_id)

            candidates = uow.get_repo(RoomRepository).search(statuses=REQUESTABLE_STATUSES)
            active = uow.get_repo(RoomAssignmentRepository).get_active_for_student(student.id)
            # Same predicate that picks recipients of the new-room notification
            rooms = find_matching_rooms(
                preference,
                candidates,
                occupied_room_id=active.room_id if active else None,
            )

            total = len(rooms)
            page = rooms[params.offset: params.offset + params.page_size]
            statuses = uow.get_repo(RoomRequestRepository).latest_status_by_room(
                student.id, [room.id for room in page]
            )

            def to_match(room: Room) -> MatchingRoomResponse:
                status = statuses.get(room.id)
                return to_schema(
                    room,
                    MatchingRoomResponse,
                    has_pending_request=status == RoomRequestStatus.PENDING.value,
                    request_status=status,
                )

            logger.debug("Student %s matched %d of %d rooms", student.id, total, len(candidates))
            return paginate(items=page, total_items=total, params=params, mapper=to_match)
