import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from clinicalcanvas.config import Settings, normalize_database_url
from clinicalcanvas.db import Base
import clinicalcanvas.models  # noqa: F401

# Alembic 설정 객체
config = context.config

# logging 설정
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# 대상 메타데이터 (모든 모델의 Base.metadata)
target_metadata = Base.metadata


def get_db_url() -> str:
    """
    DB URL 우선순위:
    1) 환경변수 ALEMBIC_DB_URL
    2) 앱과 같은 Settings (ASYNC_DATABASE_URL / DATABASE_URL / .env)
    """
    env_url = os.getenv("ALEMBIC_DB_URL")
    if env_url:
        return normalize_database_url(env_url)
    return Settings.from_env().database_url


def run_migrations_offline() -> None:
    """offline 모드 (SQL 출력 전용)"""
    context.configure(
        url=get_db_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # SQLite 는 ALTER 제약이 있어 batch 모드 사용
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = get_db_url()

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """online 모드 (실제 DB에 적용)"""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
