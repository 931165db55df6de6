# dormhub/services/allocation/allocation_service.py
"""
Allocation workflows.

Direct admin placement and checkout, and the student request pipeline
(create, accept, reject). Each workflow runs in exactly one unit of work;
rooms are row-locked in ascending id order before capacity is checked, and
notifications go out only after the unit has committed.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from dormhub.models.room_request import RoomRequest
from dormhub.repositories import RoomRepository, RoomRequestRepository
from dormhub.schemas.allocation import (
    AssignmentDetailResponse,
    AssignmentResponse,
    AssignStudentRequest,
    CheckOutRequest,
    RoomRequestCreate,
    RoomRequestDecisionResponse,
    RoomRequestResponse,
)
from dormhub.schemas.common.enums import NotificationType, RelatedEntityType, RoomRequestStatus, RoomStatus
from dormhub.services.allocation.occupancy_ledger import OccupancyLedger
from dormhub.services.common import UnitOfWork, errors
from dormhub.services.common.lookups import get_acting_student, get_student
from dormhub.services.common.mapping import to_schema
from dormhub.services.common.permissions import Principal, require_admin, require_student
from dormhub.services.notification.notification_service import NotificationService
from dormhub.services.payment.payment_ledger import PaymentLedger
from dormhub.services.room.room_query_service import build_assignment_detail

logger = logging.getLogger(__name__)


class AllocationService:
    """
    The only writer of room capacity and assignment state.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        notifier: NotificationService,
    ) -> None:
        self._session_factory = session_factory
        self._notifier = notifier

    # ------------------------------------------------------------------ #
    # Direct placement
    # ------------------------------------------------------------------ #

    def assign_student(self, actor: Principal, data: AssignStudentRequest) -> AssignmentDetailResponse:
        """
        Place a student in a room and open the assignment's payment.

        Raises:
            NotFoundError: Room or student missing
            CapacityExceededError: No free bed
            InvalidStateError: Room under maintenance
            ConflictError: Student already assigned and ``force_checkout`` is off
        """
        require_admin(actor)

        with UnitOfWork(self._session_factory) as uow:
            ledger = OccupancyLedger(uow)
            student = get_student(uow, data.student_id)

            current = ledger.get_active_assignment(student.id, lock=True)
            room_ids = {data.room_id} | ({current.room_id} if current is not None else set())
            room = ledger.lock_rooms(room_ids)[data.room_id]

            if room.available_beds <= 0:
                raise errors.CapacityExceededError(room.id)
            if room.is_under_maintenance:
                raise errors.InvalidStateError(
                    f"Room {room.room_number} is under maintenance",
                    current_state=RoomStatus.MAINTENANCE.value,
                    details={"room_id": room.id},
                )

            if current is not None:
                if not data.force_checkout:
                    raise errors.ConflictError(
                        f"Student {student.id} is already assigned to room {current.room_id}; check out first",
                        conflicting_field="student_id",
                        details={"room_id": current.room_id, "assignment_id": current.id},
                    )
                logger.info(
                    "Force checkout of student %s from room %s before reassignment",
                    student.id, current.room_id,
                )
                ledger.close_assignment(current, check_out_date=data.check_in_date)

            assignment = ledger.open_assignment(room, student, check_in_date=data.check_in_date)
            PaymentLedger(uow).open_payment(assignment, room, data.payment, paid_in_full=data.paid)

            logger.info("Assigned student %s to room %s (assignment %s)", student.id, room.id, assignment.id)
            return build_assignment_detail(assignment)

    def check_out_student(self, actor: Principal, data: CheckOutRequest) -> AssignmentResponse:
        """Close the student's active assignment; the payment row stays as history."""
        require_admin(actor)

        with UnitOfWork(self._session_factory) as uow:
            ledger = OccupancyLedger(uow)
            student = get_student(uow, data.student_id)

            assignment = ledger.get_active_assignment(student.id, lock=True)
            if assignment is None:
                raise errors.NotFoundError(
                    "Assignment",
                    student.id,
                    message=f"Student {student.id} is not assigned to any room",
                )

            ledger.lock_room(assignment.room_id)
            ledger.close_assignment(assignment, check_out_date=data.check_out_date)

            logger.info("Checked out student %s from room %s", student.id, assignment.room_id)
            return to_schema(assignment, AssignmentResponse)

    # ------------------------------------------------------------------ #
    # Request pipeline
    # ------------------------------------------------------------------ #

    def create_room_request(self, actor: Principal, data: RoomRequestCreate) -> RoomRequestResponse:
        require_student(actor)

        with UnitOfWork(self._session_factory) as uow:
            student = get_acting_student(uow, actor)
            room = uow.get_repo(RoomRepository).get(data.room_id)
            if room is None:
                raise errors.NotFoundError("Room", data.room_id)
            if room.available_beds <= 0:
                raise errors.CapacityExceededError(room.id)

            requests = uow.get_repo(RoomRequestRepository)
            if requests.get_pending_for_pair(student.id, room.id) is not None:
                raise errors.ConflictError(
                    f"A pending request for room {room.room_number} already exists",
                    conflicting_field="room_id",
                )

            current = OccupancyLedger(uow).get_active_assignment(student.id)
            if current is not None and current.room_id == room.id:
                raise errors.ConflictError(
                    f"Student is already assigned to room {room.room_number}",
                    conflicting_field="room_id",
                )

            request = requests.create(
                RoomRequest(
                    room_id=room.id,
                    student_id=student.id,
                    status=RoomRequestStatus.PENDING.value,
                    notes=data.notes,
                )
            )
            uow.flush()
            response = to_schema(request, RoomRequestResponse)
            student_name, room_number = student.name, room.room_number

        logger.info("Student %s requested room %s (request %s)", response.student_id, response.room_id, response.id)
        self._notifier.send_to_admins(
            NotificationType.ROOM_REQUEST,
            "New room request",
            f"{student_name} requested room {room_number}",
            related_id=response.room_id,
            related_type=RelatedEntityType.ROOM,
        )
        return response

    def accept_room_request(self, actor: Principal, request_id: int) -> RoomRequestDecisionResponse:
        """
        Accept a pending request.

        Closes the student's current assignment (if it is in another room),
        places the student in the requested room, opens the payment and
        rejects the student's other pending requests. Either all of it
        commits or none of it does.
        """
        require_admin(actor)

        with UnitOfWork(self._session_factory) as uow:
            requests = uow.get_repo(RoomRequestRepository)
            request = self._load_pending(requests, request_id, lock=True)

            ledger = OccupancyLedger(uow)
            student = get_student(uow, request.student_id)
            current = ledger.get_active_assignment(student.id, lock=True)
            if current is not None and current.room_id == request.room_id:
                raise errors.ConflictError(
                    f"Student {student.id} already occupies room {request.room_id}",
                    conflicting_field="room_id",
                )

            room_ids = {request.room_id} | ({current.room_id} if current is not None else set())
            room = ledger.lock_rooms(room_ids)[request.room_id]
            if room.available_beds <= 0:
                raise errors.CapacityExceededError(
                    room.id,
                    message=f"Room {room.room_number} has no available beds left",
                )

            released_id: Optional[int] = None
            if current is not None:
                released_id = current.id
                ledger.close_assignment(current)

            assignment = ledger.open_assignment(room, student)
            PaymentLedger(uow).open_payment(assignment, room)

            request.status = RoomRequestStatus.ACCEPTED.value
            rejected_ids: List[int] = []
            for sibling in requests.list_other_pending_for_student(student.id, exclude_id=request.id):
                sibling.status = RoomRequestStatus.REJECTED.value
                rejected_ids.append(sibling.id)
            uow.flush()

            result = RoomRequestDecisionResponse(
                request=to_schema(request, RoomRequestResponse),
                assignment=build_assignment_detail(assignment),
                released_assignment_id=released_id,
                rejected_request_ids=rejected_ids,
            )
            user_id, room_number = student.user_id, room.room_number

        logger.info(
            "Accepted request %s: student %s -> room %s; released=%s auto-rejected=%s",
            request_id, result.assignment.student_id, result.assignment.room_id, released_id, rejected_ids,
        )
        self._notifier.send(
            user_id,
            NotificationType.ROOM_REQUEST_ACCEPTED,
            "Room request accepted",
            f"Your request for room {room_number} has been accepted",
            related_id=result.assignment.room_id,
            related_type=RelatedEntityType.ROOM,
        )
        return result

    def reject_room_request(self, actor: Principal, request_id: int) -> RoomRequestResponse:
        require_admin(actor)

        with UnitOfWork(self._session_factory) as uow:
            requests = uow.get_repo(RoomRequestRepository)
            request = self._load_pending(requests, request_id, lock=True)
            request.status = RoomRequestStatus.REJECTED.value
            uow.flush()

            response = to_schema(request, RoomRequestResponse)
            user_id, room_number = request.student.user_id, request.room.room_number

        logger.info("Rejected request %s", request_id)
        self._notifier.send(
            user_id,
            NotificationType.ROOM_REQUEST_REJECTED,
            "Room request rejected",
            f"Your request for room {room_number} has been rejected",
            related_id=response.room_id,
            related_type=RelatedEntityType.ROOM,
        )
        return response

    @staticmethod
    def _load_pending(requests: RoomRequestRepository, request_id: int, *, lock: bool) -> RoomRequest:
        request = requests.get_for_update(request_id) if lock else requests.get(request_id)
        if request is None:
            raise errors.NotFoundError("RoomRequest", request_id)
        if request.status != RoomRequestStatus.PENDING.value:
            raise errors.InvalidStateError(
                f"Room request {request_id} is already {request.status}",
                current_state=request.status,
                details={"request_id": request_id},
            )
        return request
