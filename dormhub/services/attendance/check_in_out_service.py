# dormhub/services/attendance/check_in_out_service.py
"""
Daily building check-in/out log.

Each student has at most one open check-in per calendar day (UTC). The
student and all admins are told about every entry and exit.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from dormhub.models.base import utcnow
from dormhub.models.check_in_out import CheckInOut
from dormhub.repositories import CheckInOutRepository, StudentRepository
from dormhub.schemas.check_in_out import CheckInOutResponse, CheckInStatusResponse, StudentQRCode
from dormhub.schemas.common.enums import CheckInOutStatus, NotificationType, RelatedEntityType, UserRole
from dormhub.schemas.common.pagination import PaginatedResponse, PaginationParams
from dormhub.schemas.room import StudentBrief
from dormhub.services.attendance.qr_code import decode_student_qr, encode_student_qr, render_qr_data_url
from dormhub.services.common import UnitOfWork, errors
from dormhub.services.common.lookups import get_acting_student, get_student
from dormhub.services.common.mapping import to_schema, to_schema_list
from dormhub.services.common.pagination import paginate
from dormhub.services.common.permissions import PermissionDenied, Principal, require_admin, require_student
from dormhub.services.notification.notification_service import NotificationService

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


class CheckInOutService:

    def __init__(
        self,
        session_factory: Callable[[], Session],
        notifier: NotificationService,
    ) -> None:
        self._session_factory = session_factory
        self._notifier = notifier

    def check_in(self, actor: Principal, student_id: int, notes: Optional[str] = None) -> CheckInOutResponse:
        require_admin(actor)
        response, user_id, name = self._check_in(student_id, notes)
        self._announce(response, user_id, name)
        return response

    def check_out(self, actor: Principal, student_id: int, notes: Optional[str] = None) -> CheckInOutResponse:
        require_admin(actor)
        response, user_id, name = self._check_out(student_id, notes)
        self._announce(response, user_id, name)
        return response

    def toggle_by_qr(self, actor: Principal, payload: str, notes: Optional[str] = None) -> CheckInOutResponse:
        """Check the scanned student out if checked in today, otherwise in."""
        require_admin(actor)
        student_id = decode_student_qr(payload)

        with UnitOfWork(self._session_factory) as uow:
            get_student(uow, student_id)
            is_open = uow.get_repo(CheckInOutRepository).get_open(student_id, utcnow().date()) is not None

        if is_open:
            response, user_id, name = self._check_out(student_id, notes)
        else:
            response, user_id, name = self._check_in(student_id, notes)
        self._announce(response, user_id, name)
        return response

    def list_logs(
        self,
        actor: Principal,
        params: PaginationParams,
        day: Optional[date] = None,
        student_id: Optional[int] = None,
    ) -> PaginatedResponse[CheckInOutResponse]:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(CheckInOutRepository)
            items, total = repo.paginate(
                repo.search_stmt(day=day, student_id=student_id),
                page=params.page,
                page_size=params.page_size,
            )
            return paginate(
                items=items,
                total_items=total,
                params=params,
                mapper=CheckInOutResponse.model_validate,
            )

    def student_qr_code(self, actor: Principal, student_id: int) -> StudentQRCode:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            student = get_student(uow, student_id)
            payload = encode_student_qr(student.id)
        return StudentQRCode(student_id=student_id, payload=payload, qr_code=render_qr_data_url(payload))

    def current_status(self, actor: Principal) -> CheckInStatusResponse:
        """Today's open check-in for the acting student, if any."""
        require_student(actor)
        with UnitOfWork(self._session_factory) as uow:
            student = get_acting_student(uow, actor)
            entry = uow.get_repo(CheckInOutRepository).get_open(student.id, utcnow().date(), lock=False)
            if entry is None:
                return CheckInStatusResponse(is_checked_in=False)
            return CheckInStatusResponse(
                is_checked_in=True,
                check_in_time=entry.check_in_time,
                check_out_time=entry.check_out_time,
                status=CheckInOutStatus(entry.status),
            )

    def my_history(self, actor: Principal, params: PaginationParams) -> PaginatedResponse[CheckInOutResponse]:
        require_student(actor)
        with UnitOfWork(self._session_factory) as uow:
            student = get_acting_student(uow, actor)
            return self._history(uow, student.id, params)

    def student_history(
        self,
        actor: Principal,
        student_id: int,
        params: PaginationParams,
    ) -> PaginatedResponse[CheckInOutResponse]:
        """Any student's history for admins; students only see their own."""
        with UnitOfWork(self._session_factory) as uow:
            if actor.role != UserRole.ADMIN:
                require_student(actor)
                if get_acting_student(uow, actor).id != student_id:
                    raise PermissionDenied(
                        "Students may only view their own history",
                        user_id=actor.user_id,
                        role=actor.role,
                    )
            get_student(uow, student_id)
            return self._history(uow, student_id, params)

    def today(self, actor: Principal) -> List[CheckInOutResponse]:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            entries = uow.get_repo(CheckInOutRepository).list_for_day(utcnow().date())
            return to_schema_list(entries, CheckInOutResponse)

    def search_students(self, actor: Principal, query: str, limit: int = 5) -> List[StudentBrief]:
        """Name autocomplete for the check-in desk; terms under two characters match nothing."""
        require_admin(actor)
        term = (query or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            return []
        with UnitOfWork(self._session_factory) as uow:
            students = uow.get_repo(StudentRepository).search_by_name(term, limit=limit)
            return to_schema_list(students, StudentBrief)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _history(uow: UnitOfWork, student_id: int, params: PaginationParams) -> PaginatedResponse[CheckInOutResponse]:
        repo = uow.get_repo(CheckInOutRepository)
        items, total = repo.paginate(
            repo.history_stmt(student_id),
            page=params.page,
            page_size=params.page_size,
        )
        return paginate(
            items=items,
            total_items=total,
            params=params,
            mapper=CheckInOutResponse.model_validate,
        )

    def _check_in(self, student_id: int, notes: Optional[str]) -> Tuple[CheckInOutResponse, Optional[int], str]:
        now = utcnow()
        with UnitOfWork(self._session_factory) as uow:
            student = get_student(uow, student_id)
            repo = uow.get_repo(CheckInOutRepository)
            if repo.get_open(student.id, now.date()) is not None:
                raise errors.ConflictError(
                    f"Student {student.id} is already checked in today",
                    conflicting_field="student_id",
                )

            entry = repo.create(
                CheckInOut(
                    student_id=student.id,
                    date=now.date(),
                    check_in_time=now,
                    status=CheckInOutStatus.CHECKED_IN.value,
                    notes=notes,
                )
            )
            uow.flush()
            logger.info("Student %s checked in (log %s)", student.id, entry.id)
            return to_schema(entry, CheckInOutResponse), student.user_id, student.name

    def _check_out(self, student_id: int, notes: Optional[str]) -> Tuple[CheckInOutResponse, Optional[int], str]:
        now = utcnow()
        with UnitOfWork(self._session_factory) as uow:
            student = get_student(uow, student_id)
            entry = uow.get_repo(CheckInOutRepository).get_open(student.id, now.date())
            if entry is None:
                raise errors.InvalidStateError(
                    f"Student {student.id} has no open check-in today",
                    current_state=CheckInOutStatus.CHECKED_OUT.value,
                )

            entry.check_out_time = now
            entry.status = CheckInOutStatus.CHECKED_OUT.value
            if notes:
                entry.notes = f"{entry.notes}\n{notes}" if entry.notes else notes
            uow.flush()
            logger.info("Student %s checked out (log %s)", student.id, entry.id)
            return to_schema(entry, CheckInOutResponse), student.user_id, student.name

    def _announce(self, entry: CheckInOutResponse, user_id: Optional[int], name: str) -> None:
        at = entry.check_in_time if entry.status == CheckInOutStatus.CHECKED_IN else entry.check_out_time
        stamp = at.strftime("%H:%M") if at else ""
        if entry.status == CheckInOutStatus.CHECKED_IN:
            own, admin, verb = NotificationType.CHECK_IN, NotificationType.STUDENT_CHECK_IN, "checked in"
        else:
            own, admin, verb = NotificationType.CHECK_OUT, NotificationType.STUDENT_CHECK_OUT, "checked out"

        self._notifier.send(
            user_id,
            own,
            f"You {verb}",
            f"You {verb} at {stamp}",
            related_id=entry.id,
            related_type=RelatedEntityType.CHECK_IN_OUT,
        )
        self._notifier.send_to_admins(
            admin,
            f"Student {verb}",
            f"{name} {verb} at {stamp}",
            related_id=entry.id,
            related_type=RelatedEntityType.CHECK_IN_OUT,
        )
