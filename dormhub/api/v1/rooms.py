"""
Room endpoints: administration, occupancy views, assignment and checkout.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from dormhub.dependencies import (
    CurrentPrincipal,
    Pagination,
    get_allocation_service,
    get_room_query_service,
    get_room_service,
)
from dormhub.schemas.allocation import AssignStudentRequest, CheckOutRequest
from dormhub.schemas.common.enums import RoomStatus, RoomType
from dormhub.schemas.common.response import SuccessResponse
from dormhub.schemas.room import RoomCreate, RoomFilterParams, RoomUpdate
from dormhub.services.allocation import AllocationService
from dormhub.services.room import RoomQueryService, RoomService

router = APIRouter(prefix="/rooms", tags=["Rooms"])

RoomServiceDep = Annotated[RoomService, Depends(get_room_service)]
RoomQueriesDep = Annotated[RoomQueryService, Depends(get_room_query_service)]
AllocationDep = Annotated[AllocationService, Depends(get_allocation_service)]


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create room")
def create_room(body: RoomCreate, actor: CurrentPrincipal, service: RoomServiceDep) -> SuccessResponse:
    room = service.create_room(actor, body)
    return SuccessResponse.create("Room created successfully", room)


@router.get("", summary="List rooms")
def list_rooms(
    actor: CurrentPrincipal,
    queries: RoomQueriesDep,
    pagination: Pagination,
    room_status: Annotated[Optional[RoomStatus], Query(alias="status")] = None,
    building_id: Optional[int] = None,
    floor: Optional[int] = None,
    room_type: Optional[RoomType] = None,
) -> SuccessResponse:
    filters = RoomFilterParams(
        status=room_status,
        building_id=building_id,
        floor=floor,
        room_type=room_type,
    )
    return SuccessResponse.create(data=queries.list_rooms(actor, filters, pagination))


@router.get("/my-room", summary="Current room of the calling student")
def get_my_room(actor: CurrentPrincipal, queries: RoomQueriesDep) -> SuccessResponse:
    return SuccessResponse.create(data=queries.get_my_room(actor))


@router.get("/student/{student_id}", summary="Current room of a student")
def get_student_room(student_id: int, actor: CurrentPrincipal, queries: RoomQueriesDep) -> SuccessResponse:
    return SuccessResponse.create(data=queries.get_student_room(actor, student_id))


@router.post("/assign", status_code=status.HTTP_201_CREATED, summary="Assign student to room")
def assign_student(
    body: AssignStudentRequest,
    actor: CurrentPrincipal,
    allocation: AllocationDep,
) -> SuccessResponse:
    assignment = allocation.assign_student(actor, body)
    return SuccessResponse.create("Student assigned to room successfully", assignment)


@router.post("/checkout", summary="Check student out of their room")
def check_out_student(
    body: CheckOutRequest,
    actor: CurrentPrincipal,
    allocation: AllocationDep,
) -> SuccessResponse:
    assignment = allocation.check_out_student(actor, body)
    return SuccessResponse.create("Student checked out successfully", assignment)


@router.get("/{room_id}", summary="Room with occupants and pending requests")
def get_room(room_id: int, actor: CurrentPrincipal, queries: RoomQueriesDep) -> SuccessResponse:
    return SuccessResponse.create(data=queries.get_room(actor, room_id))


@router.get("/{room_id}/students", summary="Room occupants")
def get_room_students(
    room_id: int,
    actor: CurrentPrincipal,
    queries: RoomQueriesDep,
    include_inactive: bool = False,
) -> SuccessResponse:
    occupants = queries.get_room_occupants(actor, room_id, include_inactive=include_inactive)
    return SuccessResponse.create(data=occupants)


@router.put("/{room_id}", summary="Update room")
def update_room(room_id: int, body: RoomUpdate, actor: CurrentPrincipal, service: RoomServiceDep) -> SuccessResponse:
    room = service.update_room(actor, room_id, body)
    return SuccessResponse.create("Room updated successfully", room)


@router.delete("/{room_id}", summary="Delete room")
def delete_room(room_id: int, actor: CurrentPrincipal, service: RoomServiceDep) -> SuccessResponse:
    service.delete_room(actor, room_id)
    return SuccessResponse.create("Room deleted successfully")
