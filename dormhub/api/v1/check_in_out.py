"""
Daily check-in/out endpoints.

Recording, scanning and the desk views are admin only; students read
their own state and history.
"""
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from dormhub.dependencies import CurrentPrincipal, Pagination, get_check_in_out_service
from dormhub.schemas.check_in_out import CheckInOutRequest, QRScanRequest
from dormhub.schemas.common.response import SuccessResponse
from dormhub.services.attendance import CheckInOutService

router = APIRouter(prefix="/check-in-out", tags=["Check-In/Out"])

CheckInOutServiceDep = Annotated[CheckInOutService, Depends(get_check_in_out_service)]


@router.post("/check-in", status_code=status.HTTP_201_CREATED, summary="Check a student in")
def check_in(body: CheckInOutRequest, actor: CurrentPrincipal, service: CheckInOutServiceDep) -> SuccessResponse:
    entry = service.check_in(actor, body.student_id, body.notes)
    return SuccessResponse.create("Student checked in successfully", entry)


@router.post("/check-out", summary="Check a student out")
def check_out(body: CheckInOutRequest, actor: CurrentPrincipal, service: CheckInOutServiceDep) -> SuccessResponse:
    entry = service.check_out(actor, body.student_id, body.notes)
    return SuccessResponse.create("Student checked out successfully", entry)


@router.post("/scan", summary="Toggle check-in state from a scanned QR payload")
def scan(body: QRScanRequest, actor: CurrentPrincipal, service: CheckInOutServiceDep) -> SuccessResponse:
    entry = service.toggle_by_qr(actor, body.payload, body.notes)
    verb = "in" if entry.status.value == "checked_in" else "out"
    return SuccessResponse.create(f"Student checked {verb} successfully", entry)


@router.get("/current-status", summary="Own check-in state today")
def current_status(actor: CurrentPrincipal, service: CheckInOutServiceDep) -> SuccessResponse:
    return SuccessResponse.create(data=service.current_status(actor))


@router.get("/my-history", summary="Own check-in/out history")
def my_history(actor: CurrentPrincipal, service: CheckInOutServiceDep, pagination: Pagination) -> SuccessResponse:
    return SuccessResponse.create(data=service.my_history(actor, pagination))


@router.get("/today", summary="Today's check-in/out records")
def today(actor: CurrentPrincipal, service: CheckInOutServiceDep) -> SuccessResponse:
    return SuccessResponse.create(data=service.today(actor))


@router.get("/search-students", summary="Student name autocomplete")
def search_students(
    actor: CurrentPrincipal,
    service: CheckInOutServiceDep,
    q: str = "",
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
) -> SuccessResponse:
    return SuccessResponse.create(data=service.search_students(actor, q, limit=limit))


@router.get("/student/{student_id}", summary="A student's check-in/out history")
def student_history(
    student_id: int,
    actor: CurrentPrincipal,
    service: CheckInOutServiceDep,
    pagination: Pagination,
) -> SuccessResponse:
    return SuccessResponse.create(data=service.student_history(actor, student_id, pagination))


@router.get("/qr/{student_id}", summary="QR payload for a student")
def student_qr(student_id: int, actor: CurrentPrincipal, service: CheckInOutServiceDep) -> SuccessResponse:
    return SuccessResponse.create(data=service.student_qr_code(actor, student_id))


@router.get("", summary="Check-in/out log")
def list_logs(
    actor: CurrentPrincipal,
    service: CheckInOutServiceDep,
    pagination: Pagination,
    day: Annotated[Optional[date], Query(alias="date")] = None,
    student_id: Optional[int] = None,
) -> SuccessResponse:
    return SuccessResponse.create(data=service.list_logs(actor, pagination, day=day, student_id=student_id))
