"""
Allocation service layer.

Provides business logic for:
- Occupancy bookkeeping (capacity, derived room status, assignments)
- Direct assignment and checkout
- Room request pipeline (create, accept, reject)
"""

from dormhub.services.allocation.occupancy_ledger import (
    OccupancyLedger,
    derive_room_status,
    resolve_room_status,
)
from dormhub.services.allocation.allocation_service import AllocationService

__all__ = [
    "OccupancyLedger",
    "derive_room_status",
    "resolve_room_status",
    "AllocationService",
]
