# app/qr_attendance/modules/sync_client.py

import httpx
import logging
from datetime import timezone
from typing import Any, Dict, List, Optional
from pydantic import ValidationError

from ..config.config import settings
from ..models.roster_models import ClassData, AddClassPayload, SyncData
from ..models.attendance_models import StudentAttendanceRecord, TeacherAttendanceRecord

logger = logging.getLogger(__name__)

# Custom exceptions for the remote plugin
class SyncApiError(Exception):
    """Base class for every failure talking to the remote sync plugin."""
    pass

class SyncNetworkError(SyncApiError):
    """Raised when the plugin cannot be reached or the request times out."""
    pass

class SyncAuthError(SyncApiError):
    """Raised when the plugin rejects the secret key (401/403)."""
    pass

class SyncServerError(SyncApiError):
    """Raised for any other non-success status from the plugin."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code

class SyncMalformedResponseError(SyncApiError):
    """Raised when the plugin answers with a body we cannot understand."""
    pass


def to_wire_timestamp(record: StudentAttendanceRecord) -> str:
    """UTC ISO 8601 with milliseconds and a trailing Z, e.g. 2024-05-01T08:15:00.123Z."""
    return record.timestamp.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SyncApiClient:
    """
    Client for the school's custom-sync REST plugin.
    Uses an injected HTTP client so the station shares one connection pool and
    one timeout policy across all remote calls.
    """

    def __init__(self, secret_key: str, http_client: httpx.AsyncClient, base_url: Optional[str] = None):
        self._secret_key = secret_key
        self._client = http_client
        self._base_url = (base_url or settings.SYNC_API_BASE_URL).rstrip("/")

    async def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Sends one request carrying the X-Sync-Key header and returns the decoded
        JSON body, or None when the body is empty.
        """
        headers = {"Content-Type": "application/json", "X-Sync-Key": self._secret_key}
        url = f"{self._base_url}{endpoint}"
        try:
            response = await self._client.request(method, url, headers=headers, json=payload)
        except httpx.RequestError as e:
            logger.error(f"Network error calling {method} {endpoint}: {e}", exc_info=True)
            raise SyncNetworkError(f"Could not reach the school server: {e.__class__.__name__}") from e

        if not response.is_success:
            message = self._error_message(response)
            logger.warning(f"{method} {endpoint} failed with status {response.status_code}: {message}")
            if response.status_code in (401, 403):
                raise SyncAuthError(message)
            raise SyncServerError(message, status_code=response.status_code)

        if not response.content.strip():
            return None
        try:
            return response.json()
        except (ValueError, RecursionError) as e:
            logger.error(f"{method} {endpoint} returned a non-JSON body.")
            raise SyncMalformedResponseError("The school server returned an invalid response.") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except (ValueError, RecursionError):
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.reason_phrase or "An unknown API error occurred"

    async def fetch_all_data(self) -> SyncData:
        """
        Fetches students, teachers and classes in one call (GET /data).
        Raises SyncMalformedResponseError if the body is not the expected shape.
        """
        logger.info("Fetching roster data from the school server.")
        body = await self._request("GET", "/data")
        if not isinstance(body, dict):
            raise SyncMalformedResponseError("The school server returned no roster data.")
        try:
            data = SyncData.model_validate(body)
        except ValidationError as e:
            logger.error(f"Roster payload failed validation: {e}")
            raise SyncMalformedResponseError("The roster data from the school server is malformed.") from e
        logger.info(f"Fetched {len(data.students)} students, {len(data.teachers)} teachers, {len(data.classes)} classes.")
        return data

    async def upload_student_attendance(self, records: List[StudentAttendanceRecord]) -> None:
        payload = {"students": [{"id": r.id, "timestamp": to_wire_timestamp(r)} for r in records]}
        await self._request("POST", "/attendance", payload)
        logger.info(f"Uploaded {len(records)} student attendance record(s).")

    async def upload_teacher_attendance(self, records: List[TeacherAttendanceRecord]) -> None:
        payload = {"teachers": [r.model_dump(mode="json", by_alias=True) for r in records]}
        await self._request("POST", "/attendance", payload)
        logger.info(f"Uploaded {len(records)} teacher attendance record(s).")

    async def get_classes(self) -> List[ClassData]:
        body = await self._request("GET", "/classes")
        if body is None:
            return []
        if not isinstance(body, list):
            raise SyncMalformedResponseError("The class list from the school server is malformed.")
        try:
            return [ClassData.model_validate(item) for item in body]
        except ValidationError as e:
            raise SyncMalformedResponseError("The class list from the school server is malformed.") from e

    async def add_class(self, payload: AddClassPayload) -> Any:
        logger.info(f"Creating class '{payload.class_name}' on the school server.")
        return await self._request("POST", "/classes", payload.model_dump())

    async def delete_class(self, class_id: str) -> Any:
        logger.info(f"Deleting class '{class_id}' on the school server.")
        return await self._request("DELETE", f"/classes/{class_id}")
