"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories.
Services are intentionally thin: they validate references between
aggregates, forward queries to repositories and persist changes.
They return `None` for missing rows and raise `ValueError` for
invalid input; the HTTP layer decides how to answer either case.
"""

import logging
from pathlib import Path
from typing import List, Optional
from sqlmodel import Session
from . import models, repositories
from .config import settings
from .utils.images import make_preview, sniff_image, suffix_for

logger = logging.getLogger(__name__)


class FacultyService:
    """Faculty CRUD plus color/name lookups."""
    def __init__(self, session: Session):
        self.session = session
        self.faculty_repo = repositories.FacultyRepository(session)
        self.student_repo = repositories.StudentRepository(session)

    def create(self, name: Optional[str], color: Optional[str]) -> models.Faculty:
        faculty = self.faculty_repo.save(models.Faculty(name=name, color=color))
        logger.info("Created faculty %s", faculty.id)
        return faculty

    def get(self, faculty_id: int) -> Optional[models.Faculty]:
        return self.faculty_repo.get(faculty_id)

    def update(self, faculty_id: int, name: Optional[str], color: Optional[str]) -> Optional[models.Faculty]:
        """Overwrite every field of an existing faculty; `None` if it does not exist."""
        faculty = self.faculty_repo.get(faculty_id)
        if not faculty:
            return None
        faculty.name = name
        faculty.color = color
        faculty = self.faculty_repo.save(faculty)
        logger.info("Updated faculty %s", faculty.id)
        return faculty

    def delete(self, faculty_id: int) -> bool:
        """Delete a faculty after detaching its students.

        Returns False when there was nothing to delete.
        """
        faculty = self.faculty_repo.get(faculty_id)
        if not faculty:
            return False
        self.student_repo.detach_from_faculty(faculty_id)
        self.faculty_repo.delete(faculty)
        logger.info("Deleted faculty %s", faculty_id)
        return True

    def list(self) -> List[models.Faculty]:
        return self.faculty_repo.list_all()

    def filter_by_color(self, color: str) -> List[models.Faculty]:
        return self.faculty_repo.list_by_color(color)

    def search_by_name_or_color(self, search: str) -> List[models.Faculty]:
        """Match `search` against name or color, ignoring case."""
        return self.faculty_repo.list_by_name_or_color_ignore_case(search, search)

    def find_by_student_id(self, student_id: int) -> Optional[models.Faculty]:
        """Return the faculty of a student.

        Raises LookupError when the student does not exist; returns
        `None` when the student simply has no faculty.
        """
        student = self.student_repo.get(student_id)
        if not student:
            raise LookupError(f"student not found: {student_id}")
        return student.faculty


class StudentService:
    """Student CRUD, age filters and aggregates."""
    LAST_STUDENTS_LIMIT = 5

    def __init__(self, session: Session):
        self.session = session
        self.student_repo = repositories.StudentRepository(session)
        self.faculty_repo = repositories.FacultyRepository(session)
        self.avatar_repo = repositories.AvatarRepository(session)

    def _check_faculty(self, faculty_id: Optional[int]) -> None:
        if faculty_id is not None and not self.faculty_repo.get(faculty_id):
            raise ValueError(f"faculty not found: {faculty_id}")

    def create(self, name: Optional[str], age: int, faculty_id: Optional[int] = None) -> models.Student:
        """Persist a new student; `faculty_id` must reference an existing faculty."""
        self._check_faculty(faculty_id)
        student = self.student_repo.save(models.Student(name=name, age=age, faculty_id=faculty_id))
        logger.info("Created student %s", student.id)
        return student

    def get(self, student_id: int) -> Optional[models.Student]:
        return self.student_repo.get(student_id)

    def update(self, student_id: int, name: Optional[str], age: int, faculty_id: Optional[int] = None) -> Optional[models.Student]:
        """Overwrite every field of an existing student; `None` if it does not exist."""
        student = self.student_repo.get(student_id)
        if not student:
            return None
        self._check_faculty(faculty_id)
        student.name = name
        student.age = age
        student.faculty_id = faculty_id
        student = self.student_repo.save(student)
        logger.info("Updated student %s", student.id)
        return student

    def delete(self, student_id: int) -> bool:
        """Delete a student together with its avatar row and stored file.

        The file is removed only after the row deletions are committed.
        """
        student = self.student_repo.get(student_id)
        if not student:
            return False
        avatar = self.avatar_repo.get_first_by_student(student)
        avatar_path = Path(avatar.file_path) if avatar else None
        if avatar:
            self.avatar_repo.delete(avatar, commit=False)
        self.student_repo.delete(student)
        if avatar_path is not None:
            avatar_path.unlink(missing_ok=True)
        logger.info("Deleted student %s", student_id)
        return True

    def list(self) -> List[models.Student]:
        return self.student_repo.list_all()

    def filter_by_age(self, age: int) -> List[models.Student]:
        return self.student_repo.list_by_age(age)

    def filter_by_age_range(self, min_age: int, max_age: int) -> List[models.Student]:
        """Inclusive range; an inverted range simply matches nothing."""
        return self.student_repo.list_by_age_between(min_age, max_age)

    def find_by_faculty_id(self, faculty_id: int) -> Optional[List[models.Student]]:
        """Return the students of a faculty, or `None` if the faculty does not exist."""
        if not self.faculty_repo.get(faculty_id):
            return None
        return self.student_repo.list_by_faculty(faculty_id)

    def count(self) -> int:
        return self.student_repo.count()

    def average_age(self) -> float:
        avg = self.student_repo.average_age()
        return float(avg) if avg is not None else 0.0

    def last_five(self) -> List[models.Student]:
        return self.student_repo.list_last(self.LAST_STUDENTS_LIMIT)


class AvatarService:
    """Store avatar uploads on disk with a preview copy in the database."""
    def __init__(self, session: Session, avatar_dir: Optional[Path] = None,
                 max_upload_bytes: Optional[int] = None, preview_width: Optional[int] = None):
        self.session = session
        self.avatar_repo = repositories.AvatarRepository(session)
        self.student_repo = repositories.StudentRepository(session)
        self.avatar_dir = Path(avatar_dir or settings.AVATAR_DIR)
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES
        self.preview_width = preview_width or settings.AVATAR_PREVIEW_WIDTH

    def upload(self, student_id: int, filename: Optional[str], payload: bytes) -> Optional[models.Avatar]:
        """Validate and store an avatar for `student_id`.

        Returns `None` if the student does not exist. Raises
        `UnsupportedImageError` for payloads that are not a decodable
        image and `ValueError` for empty or oversized ones. A second
        upload for the same student overwrites the existing avatar row
        and file. Nothing on disk changes until the payload has been
        decoded, and the previous file is only removed once the new row
        is committed.
        """
        student = self.student_repo.get(student_id)
        if not student:
            return None
        if not payload:
            raise ValueError("empty file")
        if len(payload) > self.max_upload_bytes:
            raise ValueError("file too large")
        fmt, media_type = sniff_image(payload)
        preview = make_preview(payload, self.preview_width)

        self.avatar_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.avatar_dir / f"{student.id}{suffix_for(fmt)}"
        staged_path = file_path.with_name(file_path.name + ".part")
        staged_path.write_bytes(payload)

        avatar = self.avatar_repo.get_first_by_student(student)
        old_path = Path(avatar.file_path) if avatar else None
        if avatar is None:
            avatar = models.Avatar(student_id=student.id, file_path=str(file_path), file_size=0,
                                   media_type=media_type, data=b"")
        avatar.file_path = str(file_path)
        avatar.file_size = len(payload)
        avatar.media_type = media_type
        avatar.data = preview
        try:
            avatar = self.avatar_repo.save(avatar)
        except Exception:
            self.session.rollback()
            staged_path.unlink(missing_ok=True)
            raise
        staged_path.replace(file_path)
        if old_path is not None and old_path != file_path:
            old_path.unlink(missing_ok=True)
        logger.info("Stored avatar %s for student %s from %r (%d bytes)",
                    avatar.id, student.id, filename, avatar.file_size)
        return avatar

    def get(self, avatar_id: int) -> Optional[models.Avatar]:
        return self.avatar_repo.get(avatar_id)

    def find_by_student(self, student: models.Student) -> Optional[models.Avatar]:
        return self.avatar_repo.get_first_by_student(student)

    def find_by_student_id(self, student_id: int) -> Optional[models.Avatar]:
        """Avatar of a student by id; raises LookupError if the student is missing."""
        student = self.student_repo.get(student_id)
        if not student:
            raise LookupError(f"student not found: {student_id}")
        return self.find_by_student(student)

    def list(self, page: Optional[int] = None, size: Optional[int] = None) -> List[models.Avatar]:
        """List all avatars, or one 1-based page when both `page` and `size` are set."""
        if page is None or size is None:
            return self.avatar_repo.list_all()
        if page < 1 or size < 1:
            raise ValueError("page and size must be >= 1")
        return self.avatar_repo.list_all(offset=(page - 1) * size, limit=size)

    def read_file(self, avatar: models.Avatar) -> bytes:
        """Return the original upload; raises FileNotFoundError if it was removed."""
        return Path(avatar.file_path).read_bytes()
