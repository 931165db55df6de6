"""
Attendance service layer.

Provides business logic for:
- Daily check-in/out handling
- QR payload encoding, rendering and scanning
"""

from dormhub.services.attendance.check_in_out_service import CheckInOutService
from dormhub.services.attendance.qr_code import decode_student_qr, encode_student_qr, render_qr_data_url

__all__ = [
    "CheckInOutService",
    "decode_student_qr",
    "encode_student_qr",
    "render_qr_data_url",
]
