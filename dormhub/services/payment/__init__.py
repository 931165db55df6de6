"""
Payment service layer: the per-assignment ledger and its admin surface.
"""

from dormhub.services.payment.payment_ledger import PaymentLedger
from dormhub.services.payment.payment_service import PaymentService

__all__ = [
    "PaymentLedger",
    "PaymentService",
]
