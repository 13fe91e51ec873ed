"""Application settings and validation."""

import os
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    AVATAR_DIR: Path
    MAX_UPLOAD_BYTES: int
    AVATAR_PREVIEW_WIDTH: int
    ALLOW_DEV_CORS: bool
    ALLOW_SQLITE: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BACKEND_DIR / 'school.db'}")
        self.AVATAR_DIR = Path(os.getenv("AVATAR_DIR", str(BACKEND_DIR / "avatars")))
        self.MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))  # 5 MB default
        self.AVATAR_PREVIEW_WIDTH = int(os.getenv("AVATAR_PREVIEW_WIDTH", "100"))
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.ALLOW_SQLITE = os.getenv("ALLOW_SQLITE", "false").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_SQLITE and self.DATABASE_URL.startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must point to a server database in non-dev environments")
        if self.MAX_UPLOAD_BYTES <= 0:
            raise RuntimeError("MAX_UPLOAD_BYTES must be positive")
        if self.AVATAR_PREVIEW_WIDTH <= 0:
            raise RuntimeError("AVATAR_PREVIEW_WIDTH must be positive")


settings = Settings()
