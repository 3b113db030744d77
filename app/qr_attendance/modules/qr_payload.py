# app/qr_attendance/modules/qr_payload.py

import json
import logging
from pydantic import ValidationError

from ..models.attendance_models import ScanEvent

logger = logging.getLogger(__name__)


class InvalidScanPayloadError(Exception):
    """Raised when decoded QR text is not a valid {id, name, type?} object."""
    pass


def parse_scan_payload(decoded_text: str) -> ScanEvent:
    """
    Parses the text decoded from an ID card's QR code.

    The card encodes a JSON object {"id": ..., "name": ..., "type": "student"|"teacher"}.
    "type" is optional and defaults to student. Numeric IDs are accepted and
    turned into strings.
    """
    try:
        payload = json.loads(decoded_text)
    except (TypeError, ValueError, RecursionError):
        logger.info("Scanned text is not JSON, rejecting.")
        raise InvalidScanPayloadError("Invalid QR code format.")

    if not isinstance(payload, dict):
        raise InvalidScanPayloadError("Invalid QR code format.")

    scan_id = payload.get("id")
    name = payload.get("name")
    if scan_id is None or name is None or isinstance(scan_id, bool):
        raise InvalidScanPayloadError("Invalid QR code format.")

    person_type = payload.get("type") or "student"
    if isinstance(person_type, str):
        person_type = person_type.strip().lower()

    try:
        return ScanEvent(
            id=str(scan_id).strip(),
            name=str(name).strip(),
            type=person_type,
        )
    except ValidationError:
        # empty id/name or an unknown type
        raise InvalidScanPayloadError("Invalid QR code format.")
