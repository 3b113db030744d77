# app/qr_attendance/api/utilities/errors.py
from fastapi import HTTPException, status

from ...modules.sync_client import SyncApiError, SyncNetworkError


def sync_error_to_http(error: SyncApiError) -> HTTPException:
    """Maps a failed call to the school server onto the response the station returns."""
    if isinstance(error, SyncNetworkError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))


def upstream_failure_to_http(error: Exception) -> HTTPException:
    """
    Same mapping for service errors that wrap a SyncApiError, keeping the
    service's own message as the detail.
    """
    code = status.HTTP_502_BAD_GATEWAY
    if isinstance(error.__cause__, SyncNetworkError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HTTPException(status_code=code, detail=str(error))
