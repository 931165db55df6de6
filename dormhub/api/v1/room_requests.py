"""
Room request endpoints: students ask for rooms, admins decide.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status

from dormhub.dependencies import (
    CurrentPrincipal,
    Pagination,
    get_allocation_service,
    get_room_query_service,
)
from dormhub.schemas.allocation import RoomRequestCreate
from dormhub.schemas.common.response import SuccessResponse
from dormhub.services.allocation import AllocationService
from dormhub.services.room import RoomQueryService

router = APIRouter(prefix="/room-requests", tags=["Room Requests"])

AllocationDep = Annotated[AllocationService, Depends(get_allocation_service)]
RoomQueriesDep = Annotated[RoomQueryService, Depends(get_room_query_service)]


@router.post("", status_code=status.HTTP_201_CREATED, summary="Request a room")
def create_room_request(
    body: RoomRequestCreate,
    actor: CurrentPrincipal,
    allocation: AllocationDep,
) -> SuccessResponse:
    request = allocation.create_room_request(actor, body)
    return SuccessResponse.create("Room request submitted successfully", request)


@router.get("/my-requests", summary="Requests of the calling student")
def my_requests(actor: CurrentPrincipal, queries: RoomQueriesDep, pagination: Pagination) -> SuccessResponse:
    return SuccessResponse.create(data=queries.list_student_requests(actor, pagination))


@router.get("/matching-rooms", summary="Rooms matching the caller's preferences")
def matching_rooms(actor: CurrentPrincipal, queries: RoomQueriesDep, pagination: Pagination) -> SuccessResponse:
    return SuccessResponse.create(data=queries.get_matching_rooms(actor, pagination))


@router.get("/room/{room_id}", summary="Requests for a room")
def room_requests(
    room_id: int,
    actor: CurrentPrincipal,
    queries: RoomQueriesDep,
    pagination: Pagination,
) -> SuccessResponse:
    return SuccessResponse.create(data=queries.list_room_requests(actor, room_id, pagination))


@router.put("/{request_id}/accept", summary="Accept a pending request")
def accept_request(request_id: int, actor: CurrentPrincipal, allocation: AllocationDep) -> SuccessResponse:
    result = allocation.accept_room_request(actor, request_id)
    return SuccessResponse.create("Room request accepted", result)


@router.put("/{request_id}/reject", summary="Reject a pending request")
def reject_request(request_id: int, actor: CurrentPrincipal, allocation: AllocationDep) -> SuccessResponse:
    result = allocation.reject_room_request(actor, request_id)
    return SuccessResponse.create("Room request rejected", result)
