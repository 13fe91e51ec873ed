"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the school backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses.

Endpoints implemented:
- POST/GET/PUT/DELETE /faculty, GET /faculty/{id}
- GET /faculty/color/{color}, /faculty/search, /faculty/by-student
- POST/GET/PUT/DELETE /student, GET /student/{id}
- GET /student/age/{age}, /student/age-between, /student/by-faculty
- GET /student/count, /student/average-age, /student/last-five
- POST /avatar/{student_id}, GET /avatar, /avatar/by-student
- GET /avatar/{id}/preview, /avatar/{id}/from-file
- GET /health
"""

from fastapi import FastAPI, Depends, UploadFile, File, HTTPException, Query, Request
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from typing import List, Optional
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import services
from .schemas import AvatarOut, FacultyIn, FacultyOut, FacultyUpdate, StudentIn, StudentOut, StudentUpdate
from .utils.images import UnsupportedImageError
from .config import settings

app = FastAPI(title="Hogwarts School API")
logger = logging.getLogger("school.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# Wide-open CORS keeps local HTML testers working without extra config in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    context = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else "unknown",
    }
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        context["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed %s", json.dumps(context, ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    context["status_code"] = response.status_code
    context["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info("request_done %s", json.dumps(context, ensure_ascii=True))
    return response


def _not_found(what: str, ident: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{what} not found: {ident}")


@app.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok"}


# --- faculty ---------------------------------------------------------------

@app.post('/faculty', response_model=FacultyOut)
def create_faculty(payload: FacultyIn, db: Session = Depends(get_session)):
    return services.FacultyService(db).create(payload.name, payload.color)


@app.put('/faculty', response_model=FacultyOut)
def edit_faculty(payload: FacultyUpdate, db: Session = Depends(get_session)):
    """Replace name and color of the faculty identified by `payload.id`."""
    faculty = services.FacultyService(db).update(payload.id, payload.name, payload.color)
    if not faculty:
        raise _not_found('faculty', payload.id)
    return faculty


@app.get('/faculty', response_model=List[FacultyOut])
def list_faculties(db: Session = Depends(get_session)):
    return services.FacultyService(db).list()


@app.get('/faculty/color/{color}', response_model=List[FacultyOut])
def faculties_by_color(color: str, db: Session = Depends(get_session)):
    """Faculties whose color matches exactly (case-sensitive)."""
    return services.FacultyService(db).filter_by_color(color)


@app.get('/faculty/search', response_model=List[FacultyOut])
def search_faculties(search_string: str = Query(..., alias='searchString'), db: Session = Depends(get_session)):
    """Faculties whose name or color equals `searchString`, ignoring case."""
    return services.FacultyService(db).search_by_name_or_color(search_string)


@app.get('/faculty/by-student', response_model=Optional[FacultyOut])
def faculty_by_student(student_id: int = Query(..., alias='id'), db: Session = Depends(get_session)):
    """Faculty of a student; `null` when the student has no faculty."""
    try:
        return services.FacultyService(db).find_by_student_id(student_id)
    except LookupError:
        raise _not_found('student', student_id)


@app.get('/faculty/{faculty_id}', response_model=FacultyOut)
def get_faculty(faculty_id: int, db: Session = Depends(get_session)):
    faculty = services.FacultyService(db).get(faculty_id)
    if not faculty:
        raise _not_found('faculty', faculty_id)
    return faculty


@app.delete('/faculty/{faculty_id}')
def delete_faculty(faculty_id: int, db: Session = Depends(get_session)):
    """Delete a faculty; deleting an unknown id is a no-op."""
    services.FacultyService(db).delete(faculty_id)
    return Response(status_code=200)


# --- student ---------------------------------------------------------------

@app.post('/student', response_model=StudentOut)
def create_student(payload: StudentIn, db: Session = Depends(get_session)):
    try:
        return services.StudentService(db).create(payload.name, payload.age, payload.faculty_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.put('/student', response_model=StudentOut)
def edit_student(payload: StudentUpdate, db: Session = Depends(get_session)):
    """Replace every field of the student identified by `payload.id`."""
    try:
        student = services.StudentService(db).update(payload.id, payload.name, payload.age, payload.faculty_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not student:
        raise _not_found('student', payload.id)
    return student


@app.get('/student', response_model=List[StudentOut])
def list_students(db: Session = Depends(get_session)):
    return services.StudentService(db).list()


@app.get('/student/age/{age}', response_model=List[StudentOut])
def students_by_age(age: int, db: Session = Depends(get_session)):
    return services.StudentService(db).filter_by_age(age)


@app.get('/student/age-between', response_model=List[StudentOut])
def students_by_age_between(
    min_age: int = Query(..., alias='minAge'),
    max_age: int = Query(..., alias='maxAge'),
    db: Session = Depends(get_session),
):
    """Students with `minAge <= age <= maxAge`."""
    return services.StudentService(db).filter_by_age_range(min_age, max_age)


@app.get('/student/by-faculty', response_model=List[StudentOut])
def students_by_faculty(faculty_id: int = Query(..., alias='id'), db: Session = Depends(get_session)):
    students = services.StudentService(db).find_by_faculty_id(faculty_id)
    if students is None:
        raise _not_found('faculty', faculty_id)
    return students


@app.get('/student/count', response_model=int)
def count_students(db: Session = Depends(get_session)):
    return services.StudentService(db).count()


@app.get('/student/average-age', response_model=float)
def average_student_age(db: Session = Depends(get_session)):
    """Mean age of all students, `0.0` when there are none."""
    return services.StudentService(db).average_age()


@app.get('/student/last-five', response_model=List[StudentOut])
def last_five_students(db: Session = Depends(get_session)):
    """The five most recently created students, newest first."""
    return services.StudentService(db).last_five()


@app.get('/student/{student_id}', response_model=StudentOut)
def get_student(student_id: int, db: Session = Depends(get_session)):
    student = services.StudentService(db).get(student_id)
    if not student:
        raise _not_found('student', student_id)
    return student


@app.delete('/student/{student_id}')
def delete_student(student_id: int, db: Session = Depends(get_session)):
    """Delete a student and its avatar; deleting an unknown id is a no-op."""
    services.StudentService(db).delete(student_id)
    return Response(status_code=200)


# --- avatar ----------------------------------------------------------------

@app.post('/avatar/{student_id}', response_model=AvatarOut)
def upload_avatar(student_id: int, file: UploadFile = File(...), db: Session = Depends(get_session)):
    """Upload (or replace) the avatar of a student.

    The original file is written to `AVATAR_DIR`; a downscaled preview
    is stored in the database and served by `/avatar/{id}/preview`.
    """
    content = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    try:
        avatar = services.AvatarService(db).upload(student_id, file.filename, content)
    except UnsupportedImageError as e:
        raise HTTPException(status_code=415, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not avatar:
        raise _not_found('student', student_id)
    return avatar


@app.get('/avatar', response_model=List[AvatarOut])
def list_avatars(
    page: Optional[int] = Query(None, ge=1),
    size: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_session),
):
    """All avatars, or a single 1-based page when `page` and `size` are given."""
    return services.AvatarService(db).list(page, size)


@app.get('/avatar/by-student', response_model=Optional[AvatarOut])
def avatar_by_student(student_id: int = Query(..., alias='id'), db: Session = Depends(get_session)):
    try:
        return services.AvatarService(db).find_by_student_id(student_id)
    except LookupError:
        raise _not_found('student', student_id)


@app.get('/avatar/{avatar_id}/preview')
def avatar_preview(avatar_id: int, db: Session = Depends(get_session)):
    avatar = services.AvatarService(db).get(avatar_id)
    if not avatar:
        raise _not_found('avatar', avatar_id)
    return Response(content=avatar.data, media_type=avatar.media_type)


@app.get('/avatar/{avatar_id}/from-file')
def avatar_from_file(avatar_id: int, db: Session = Depends(get_session)):
    svc = services.AvatarService(db)
    avatar = svc.get(avatar_id)
    if not avatar:
        raise _not_found('avatar', avatar_id)
    try:
        content = svc.read_file(avatar)
    except FileNotFoundError:
        logger.warning("avatar %s file missing at %s", avatar_id, avatar.file_path)
        raise HTTPException(status_code=404, detail=f"avatar file missing: {avatar_id}")
    return Response(content=content, media_type=avatar.media_type)
