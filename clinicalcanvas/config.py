# clinicalcanvas/config.py
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "your-secret-key-change-in-production"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./clinicalcanvas.db"


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(url: str) -> str:
    """Hosted Postgres providers hand out sync URLs; the engine needs the asyncpg driver."""
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


@dataclass(frozen=True)
class Settings:
    """
    Process-wide configuration. Built once at startup and handed to create_app();
    every component receives what it needs from this object.
    """
    database_url: str = DEFAULT_DATABASE_URL
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    password_hash_rounds: int = 29000
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"
    create_tables: bool = False
    db_echo: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        # .env 파일은 프로젝트 루트 기준
        load_dotenv(dotenv_path=env_file or Path.cwd() / ".env")

        secret = os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY")
        if not secret:
            logger.warning("JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION")
            secret = DEV_JWT_SECRET

        db_url = os.getenv("ASYNC_DATABASE_URL") or os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
        origins = os.getenv("ALLOWED_ORIGINS", "*")

        return cls(
            database_url=normalize_database_url(db_url),
            jwt_secret=secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24))),
            password_hash_rounds=int(os.getenv("PASSWORD_HASH_ROUNDS", "29000")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            create_tables=_env_bool("DB_CREATE_TABLES"),
            db_echo=_env_bool("DB_ECHO"),
        )
