"""SQLModel data models.

This module defines the school's database tables using SQLModel.
Each class maps to a table and uses relationships where appropriate:
a faculty has many students, a student has at most one avatar.
"""

from typing import List, Optional
from sqlmodel import SQLModel, Field, Relationship


class Faculty(SQLModel, table=True):
    """A faculty (house) students can belong to.

    Deleting a faculty does not delete its students; the service layer
    detaches them first.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(default=None, index=True)
    color: Optional[str] = Field(default=None, index=True)
    students: List['Student'] = Relationship(back_populates='faculty')


class Student(SQLModel, table=True):
    """A student, optionally assigned to a `Faculty`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = None
    age: int = Field(default=0, index=True)
    faculty_id: Optional[int] = Field(default=None, foreign_key='faculty.id', index=True)
    faculty: Optional[Faculty] = Relationship(back_populates='students')
    avatar: Optional['Avatar'] = Relationship(
        back_populates='student',
        sa_relationship_kwargs={'uselist': False},
    )


class Avatar(SQLModel, table=True):
    """Avatar image owned by exactly one `Student`.

    Fields:
    - `file_path`: location of the original upload on disk
    - `file_size`: size of the original upload in bytes
    - `media_type`: MIME type served for both the file and the preview
    - `data`: downscaled preview bytes
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    file_path: str
    file_size: int
    media_type: str
    data: bytes
    student_id: int = Field(foreign_key='student.id', unique=True)
    student: Optional[Student] = Relationship(back_populates='avatar')
