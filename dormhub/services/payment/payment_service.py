# dormhub/services/payment/payment_service.py
"""
Admin payment surface: listing, financial totals and ledger edits.
"""
from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from dormhub.models.payment import Payment
from dormhub.repositories import PaymentRepository
from dormhub.schemas.common.enums import PaymentMethod
from dormhub.schemas.common.pagination import PaginatedResponse, PaginationParams
from dormhub.schemas.payment import (
    AdditionalPaymentRequest,
    FinancialReport,
    MethodTotals,
    PaymentFilterParams,
    PaymentListItem,
    PaymentResponse,
    PaymentUpdate,
    PaymentUpsertRequest,
)
from dormhub.services.common import UnitOfWork
from dormhub.services.common.mapping import to_schema
from dormhub.services.common.pagination import paginate
from dormhub.services.common.permissions import Principal, require_admin
from dormhub.services.payment.payment_ledger import PaymentLedger, to_money

logger = logging.getLogger(__name__)


def to_list_item(payment: Payment) -> PaymentListItem:
    assignment = payment.assignment
    return to_schema(
        payment,
        PaymentListItem,
        room_id=assignment.room_id,
        room_number=assignment.room.room_number,
        student_id=assignment.student_id,
        student_name=assignment.student.name,
    )


class PaymentService:

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def list_payments(
        self,
        actor: Principal,
        filters: PaymentFilterParams,
        params: PaginationParams,
    ) -> PaginatedResponse[PaymentListItem]:
        """Payments newest first, each with its room and student."""
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(PaymentRepository)
            items, total = repo.paginate(
                repo.search_stmt(**filters.as_query()),
                page=params.page,
                page_size=params.page_size,
            )
            return paginate(items=items, total_items=total, params=params, mapper=to_list_item)

    def financial_report(self, actor: Principal, filters: PaymentFilterParams) -> FinancialReport:
        require_admin(actor)
        query = filters.as_query()
        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(PaymentRepository)
            totals = repo.totals(**query)
            by_method = repo.totals_by_method(**query)

        return FinancialReport(
            total_due=to_money(totals["total_due"]),
            total_paid=to_money(totals["total_paid"]),
            total_remaining=to_money(totals["total_remaining"]),
            payment_count=totals["count"],
            by_method={
                PaymentMethod(method): MethodTotals(
                    total_paid=to_money(row["total_paid"]),
                    count=row["count"],
                )
                for method, row in by_method.items()
            },
        )

    def save_payment(self, actor: Principal, data: PaymentUpsertRequest) -> PaymentResponse:
        """Create or overwrite the payment attached to an assignment."""
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            payment, created = PaymentLedger(uow).upsert_for_assignment(data.assignment_id, data)
            logger.info(
                "Payment %s %s for assignment %s: status=%s",
                payment.id, "opened" if created else "overwritten", data.assignment_id, payment.status,
            )
            return to_schema(payment, PaymentResponse)

    def set_payment(self, actor: Principal, payment_id: int, data: PaymentUpdate) -> PaymentResponse:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            payment = PaymentLedger(uow).set_payment(payment_id, data)
            logger.info("Payment %s overwritten: status=%s", payment.id, payment.status)
            return to_schema(payment, PaymentResponse)

    def add_payment(
        self,
        actor: Principal,
        payment_id: int,
        data: AdditionalPaymentRequest,
    ) -> PaymentResponse:
        require_admin(actor)
        with UnitOfWork(self._session_factory) as uow:
            payment = PaymentLedger(uow).record_additional_payment(
                payment_id,
                data.amount,
                method=data.payment_method,
                note=data.notes,
            )
            return to_schema(payment, PaymentResponse)
