# dormhub/services/attendance/qr_code.py
"""
Student QR payload codec.

The payload is a small JSON document naming its own version and the
identifier it carries, so a scan never has to guess whether a number is a
user id or a student id::

    {"v": 2, "type": "student", "student_id": 17}
"""
from __future__ import annotations

import base64
import io
import json
from typing import Any

import qrcode

from dormhub.config.settings import settings
from dormhub.services.common import errors

PAYLOAD_TYPE = "student"
SUPPORTED_VERSIONS = frozenset({2})


def encode_student_qr(student_id: int, version: int = settings.QR_PAYLOAD_VERSION) -> str:
    if version not in SUPPORTED_VERSIONS:
        raise ValueError(f"Unsupported QR payload version: {version}")
    return json.dumps(
        {"v": version, "type": PAYLOAD_TYPE, "student_id": int(student_id)},
        separators=(",", ":"),
    )


def decode_student_qr(raw: str) -> int:
    """
    Return the student id carried by a scanned payload.

    Raises:
        ValidationError: Malformed JSON, unknown version, wrong payload
            type or missing/invalid student id
    """
    try:
        data: Any = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise errors.ValidationError("QR payload is not valid JSON", field="payload") from exc

    if not isinstance(data, dict):
        raise errors.ValidationError("QR payload must be a JSON object", field="payload")

    version = data.get("v")
    if version not in SUPPORTED_VERSIONS:
        raise errors.ValidationError(
            f"Unsupported QR payload version: {version!r}",
            field="payload",
            details={"supported_versions": sorted(SUPPORTED_VERSIONS)},
        )
    if data.get("type") != PAYLOAD_TYPE:
        raise errors.ValidationError(
            f"QR payload type must be '{PAYLOAD_TYPE}'",
            field="payload",
            details={"type": data.get("type")},
        )

    student_id = data.get("student_id")
    # bool is an int subclass
    if not isinstance(student_id, int) or isinstance(student_id, bool) or student_id <= 0:
        raise errors.ValidationError("QR payload carries no valid student_id", field="payload")
    return student_id


def render_qr_data_url(payload: str) -> str:
    """Render ``payload`` as a PNG QR image embedded in a data URL."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{encoded}"
