from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Optional

from ...models.roster_models import Student


class SyncStatusResponse(BaseModel):
    """State of the last roster refresh, used for the sync banner."""
    last_synced_at: Optional[datetime] = None
    last_sync_error: Optional[str] = None
    student_count: int
    teacher_count: int
    class_count: int


class SecretKeyRequest(BaseModel):
    secret_key: str = Field(..., min_length=1, description="Key shared with the school server's sync plugin.")


class SettingsResponse(BaseModel):
    has_secret_key: bool
    app_version: str
    teacher_scan_upload_mode: str


class GroupedStudentsResponse(BaseModel):
    groups: Dict[str, List[Student]]
