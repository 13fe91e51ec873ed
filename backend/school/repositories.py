"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (faculties,
students, avatars). Repositories return SQLModel objects and perform
commits/refreshes where appropriate; every query is one explicit
`select` statement.
"""

from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func, update
from . import models


class FacultyRepository:
    """CRUD operations and lookups for `Faculty` objects."""
    def __init__(self, session: Session):
        self.session = session

    def save(self, faculty: models.Faculty) -> models.Faculty:
        """Insert or update a faculty and return the managed instance."""
        self.session.add(faculty)
        self.session.commit()
        self.session.refresh(faculty)
        return faculty

    def get(self, faculty_id: int) -> Optional[models.Faculty]:
        """Get a `Faculty` by primary key."""
        return self.session.get(models.Faculty, faculty_id)

    def delete(self, faculty: models.Faculty) -> None:
        self.session.delete(faculty)
        self.session.commit()

    def list_all(self) -> List[models.Faculty]:
        stmt = select(models.Faculty).order_by(models.Faculty.id)
        return self.session.exec(stmt).all()

    def list_by_color(self, color: str) -> List[models.Faculty]:
        """Return faculties whose color matches `color` exactly."""
        stmt = select(models.Faculty).where(models.Faculty.color == color).order_by(models.Faculty.id)
        return self.session.exec(stmt).all()

    def list_by_name_or_color_ignore_case(self, name: str, color: str) -> List[models.Faculty]:
        """Return faculties whose name equals `name` or color equals `color`, ignoring case."""
        stmt = select(models.Faculty).where(
            (func.lower(models.Faculty.name) == name.lower())
            | (func.lower(models.Faculty.color) == color.lower())
        ).order_by(models.Faculty.id)
        return self.session.exec(stmt).all()


class StudentRepository:
    """CRUD operations, filters and aggregates for `Student` objects."""
    def __init__(self, session: Session):
        self.session = session

    def save(self, student: models.Student) -> models.Student:
        """Insert or update a student and return the managed instance."""
        self.session.add(student)
        self.session.commit()
        self.session.refresh(student)
        return student

    def get(self, student_id: int) -> Optional[models.Student]:
        """Get a `Student` by primary key."""
        return self.session.get(models.Student, student_id)

    def delete(self, student: models.Student) -> None:
        self.session.delete(student)
        self.session.commit()

    def list_all(self) -> List[models.Student]:
        stmt = select(models.Student).order_by(models.Student.id)
        return self.session.exec(stmt).all()

    def list_by_age(self, age: int) -> List[models.Student]:
        stmt = select(models.Student).where(models.Student.age == age).order_by(models.Student.id)
        return self.session.exec(stmt).all()

    def list_by_age_between(self, min_age: int, max_age: int) -> List[models.Student]:
        """Return students with `min_age <= age <= max_age`."""
        stmt = select(models.Student).where(
            models.Student.age.between(min_age, max_age)
        ).order_by(models.Student.id)
        return self.session.exec(stmt).all()

    def list_by_faculty(self, faculty_id: int) -> List[models.Student]:
        stmt = select(models.Student).where(models.Student.faculty_id == faculty_id).order_by(models.Student.id)
        return self.session.exec(stmt).all()

    def count(self) -> int:
        stmt = select(func.count()).select_from(models.Student)
        return self.session.exec(stmt).one()

    def average_age(self) -> Optional[float]:
        """Return the mean age, or `None` when the table is empty."""
        stmt = select(func.avg(models.Student.age))
        return self.session.exec(stmt).one()

    def list_last(self, limit: int = 5) -> List[models.Student]:
        """Return the `limit` most recently created students, newest first."""
        stmt = select(models.Student).order_by(models.Student.id.desc()).limit(limit)
        return self.session.exec(stmt).all()

    def detach_from_faculty(self, faculty_id: int) -> None:
        """Clear `faculty_id` on every student of the faculty (not committed)."""
        stmt = update(models.Student).where(models.Student.faculty_id == faculty_id).values(faculty_id=None)
        self.session.exec(stmt)


class AvatarRepository:
    """Persistence and lookups for `Avatar` records."""
    def __init__(self, session: Session):
        self.session = session

    def save(self, avatar: models.Avatar) -> models.Avatar:
        self.session.add(avatar)
        self.session.commit()
        self.session.refresh(avatar)
        return avatar

    def get(self, avatar_id: int) -> Optional[models.Avatar]:
        """Fetch a single avatar by id."""
        return self.session.get(models.Avatar, avatar_id)

    def get_first_by_student(self, student: models.Student) -> Optional[models.Avatar]:
        """Return the avatar owned by `student`, if any."""
        stmt = select(models.Avatar).where(models.Avatar.student_id == student.id)
        return self.session.exec(stmt).first()

    def list_all(self, offset: Optional[int] = None, limit: Optional[int] = None) -> List[models.Avatar]:
        """List avatars ordered by id, optionally sliced by `offset`/`limit`."""
        stmt = select(models.Avatar).order_by(models.Avatar.id)
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.session.exec(stmt).all()

    def delete(self, avatar: models.Avatar, commit: bool = True) -> None:
        self.session.delete(avatar)
        if commit:
            self.session.commit()
