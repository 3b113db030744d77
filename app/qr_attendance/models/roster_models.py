# app/qr_attendance/models/roster_models.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Union


class RemoteModel(BaseModel):
    """
    Base for records coming from the remote sync plugin.
    Field names follow Python style, aliases follow the plugin's JSON.
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")


class Student(RemoteModel):
    """A student as delivered by the remote roster."""
    student_id: str = Field(..., alias="studentId", min_length=1, description="Opaque ID assigned by the system of record")
    student_name: str = Field("", alias="studentName")
    class_name: Optional[str] = Field(None, alias="class", description="Raw class reference, e.g. '8=>A=>SCIENCE'")
    section: Optional[str] = None
    roll_number: Optional[str] = Field(None, alias="rollNumber")
    contact_number: Optional[str] = Field(None, alias="contactNumber")
    profile_photo_url: Optional[str] = Field(None, alias="profilePhotoUrl")


class Teacher(RemoteModel):
    """A teacher as delivered by the remote roster."""
    id: str = Field(..., min_length=1, description="Opaque ID assigned by the system of record")
    name: str = ""
    role: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    profile_photo_url: Optional[str] = Field(None, alias="profilePhotoUrl")


class ClassData(RemoteModel):
    id: str
    class_name: str = ""
    class_numeric: Optional[str] = None
    class_section: Union[List[str], str, None] = None
    class_capacity: Optional[str] = None
    student_count: Optional[int] = None

    @property
    def sections(self) -> List[str]:
        """class_section normalised to a list; the plugin sends either form."""
        if not self.class_section:
            return []
        if isinstance(self.class_section, str):
            return [part.strip() for part in self.class_section.split(",") if part.strip()]
        return list(self.class_section)


class AddClassPayload(BaseModel):
    """Body sent to the remote plugin when creating a class."""
    class_name: str = Field(..., min_length=1)
    class_numeric: str
    class_section: List[str] = Field(default_factory=list)
    class_capacity: str


class SyncData(BaseModel):
    """Response of GET /data. Missing or null collections become empty lists."""
    students: List[Student] = Field(default_factory=list)
    teachers: List[Teacher] = Field(default_factory=list)
    classes: List[ClassData] = Field(default_factory=list)

    @field_validator("students", "teachers", "classes", mode="before")
    @classmethod
    def none_to_empty_list(cls, v):
        return [] if v is None else v
