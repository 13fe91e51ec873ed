import io
import os
import shutil
import tempfile
from pathlib import Path

# Point the app at a throwaway database and avatar folder BEFORE importing it
_TMP_DIR = Path(tempfile.mkdtemp(prefix="school-tests-"))
os.environ["ENV"] = "dev"
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["AVATAR_DIR"] = str(_TMP_DIR / "avatars")

import pytest
from PIL import Image
from sqlalchemy import delete
from sqlmodel import Session

from school import models
from school.database import create_db_and_tables, engine


@pytest.fixture(scope="session", autouse=True)
def test_db():
    """Create the schema once and remove the scratch folder afterwards."""
    create_db_and_tables()
    yield
    engine.dispose()
    shutil.rmtree(_TMP_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def clear_db():
    """Empty every table and the avatar folder after each test so tests stay independent."""
    yield
    with Session(engine) as session:
        session.exec(delete(models.Avatar))
        session.exec(delete(models.Student))
        session.exec(delete(models.Faculty))
        session.commit()
    shutil.rmtree(os.environ["AVATAR_DIR"], ignore_errors=True)


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def avatar_dir() -> Path:
    return Path(os.environ["AVATAR_DIR"])


def make_image(width: int = 300, height: int = 150, fmt: str = "PNG") -> bytes:
    img = Image.new("RGB", (width, height), "green")
    bio = io.BytesIO()
    img.save(bio, format=fmt)
    return bio.getvalue()


def make_noise_image(size: int = 400, fmt: str = "JPEG") -> bytes:
    """A noisy image that does not compress away, for truncation tests."""
    img = Image.effect_noise((size, size), 64).convert("RGB")
    bio = io.BytesIO()
    img.save(bio, format=fmt)
    return bio.getvalue()
