"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Response schemas read straight from the
SQLModel rows, so avatar bytes never end up in a JSON body.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class FacultyIn(BaseModel):
    """Payload for creating a faculty; any `id` sent is ignored."""
    name: Optional[str] = None
    color: Optional[str] = None


class FacultyUpdate(FacultyIn):
    """Full replacement of an existing faculty, keyed by `id`."""
    id: int


class FacultyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    color: Optional[str] = None


class StudentIn(BaseModel):
    """Payload for creating a student."""
    name: Optional[str] = None
    age: int = Field(default=0, ge=0)
    faculty_id: Optional[int] = None


class StudentUpdate(StudentIn):
    """Full replacement of an existing student, keyed by `id`."""
    id: int


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    age: int
    faculty_id: Optional[int] = None


class AvatarOut(BaseModel):
    """Avatar metadata; the image itself is served by the preview/file routes."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_path: str
    file_size: int
    media_type: str
    student_id: int
