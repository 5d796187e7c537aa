"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_HOURS: int
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool
    ALLOW_REGISTRATION: bool
    MAX_IMPORT_BYTES: int
    RESPONSES_PAGE_DEFAULT: int
    RESPONSES_PAGE_MAX: int
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'assessments.db'}")
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change_me_for_prod")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "24"))
        self.ALLOW_INSECURE_JWT = os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.ALLOW_REGISTRATION = os.getenv("ALLOW_REGISTRATION", "true" if self.ENV == "dev" else "false").lower() == "true"
        self.MAX_IMPORT_BYTES = int(os.getenv("MAX_IMPORT_BYTES", str(1024 * 1024)))  # 1 MB default
        self.RESPONSES_PAGE_DEFAULT = int(os.getenv("RESPONSES_PAGE_DEFAULT", "100"))
        self.RESPONSES_PAGE_MAX = int(os.getenv("RESPONSES_PAGE_MAX", "1000"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == "change_me_for_prod":
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")
        if self.RESPONSES_PAGE_DEFAULT < 1 or self.RESPONSES_PAGE_MAX < self.RESPONSES_PAGE_DEFAULT:
            raise RuntimeError("RESPONSES_PAGE_MAX must be >= RESPONSES_PAGE_DEFAULT >= 1")


settings = Settings()
