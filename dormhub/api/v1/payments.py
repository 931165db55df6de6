"""
Payment endpoints (admin only).
"""
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from dormhub.dependencies import CurrentPrincipal, Pagination, get_payment_service
from dormhub.schemas.common.enums import PaymentMethod, PaymentStatus
from dormhub.schemas.common.response import SuccessResponse
from dormhub.schemas.payment import (
    AdditionalPaymentRequest,
    PaymentFilterParams,
    PaymentUpdate,
    PaymentUpsertRequest,
)
from dormhub.services.payment import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])

PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]


def get_payment_filters(
    payment_status: Annotated[Optional[PaymentStatus], Query(alias="status")] = None,
    payment_method: Optional[PaymentMethod] = None,
    room_id: Optional[int] = None,
    student_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> PaymentFilterParams:
    return PaymentFilterParams(
        status=payment_status,
        payment_method=payment_method,
        room_id=room_id,
        student_id=student_id,
        start_date=start_date,
        end_date=end_date,
    )


PaymentFilters = Annotated[PaymentFilterParams, Depends(get_payment_filters)]


@router.get("", summary="List payments")
def list_payments(
    actor: CurrentPrincipal,
    service: PaymentServiceDep,
    filters: PaymentFilters,
    pagination: Pagination,
) -> SuccessResponse:
    return SuccessResponse.create(data=service.list_payments(actor, filters, pagination))


@router.post("", summary="Create or overwrite the payment of an assignment")
def save_payment(body: PaymentUpsertRequest, actor: CurrentPrincipal, service: PaymentServiceDep) -> SuccessResponse:
    payment = service.save_payment(actor, body)
    return SuccessResponse.create("Payment saved successfully", payment)


@router.get("/report/financial", summary="Financial totals")
def financial_report(actor: CurrentPrincipal, service: PaymentServiceDep, filters: PaymentFilters) -> SuccessResponse:
    return SuccessResponse.create(data=service.financial_report(actor, filters))


@router.put("/{payment_id}", summary="Overwrite payment fields")
def update_payment(
    payment_id: int,
    body: PaymentUpdate,
    actor: CurrentPrincipal,
    service: PaymentServiceDep,
) -> SuccessResponse:
    payment = service.set_payment(actor, payment_id, body)
    return SuccessResponse.create("Payment updated successfully", payment)


@router.post("/{payment_id}/add", summary="Record an additional payment")
def add_payment(
    payment_id: int,
    body: AdditionalPaymentRequest,
    actor: CurrentPrincipal,
    service: PaymentServiceDep,
) -> SuccessResponse:
    payment = service.add_payment(actor, payment_id, body)
    return SuccessResponse.create("Payment recorded successfully", payment)
