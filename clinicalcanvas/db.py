from __future__ import annotations
import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import BigInteger, Integer, event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from clinicalcanvas.config import Settings

logger = logging.getLogger(__name__)

# SQLite only autoincrements INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_conn, _record):
    # ON DELETE CASCADE / SET NULL 은 SQLite 에서 기본 비활성
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Async engine + session factory, one per application."""

    def __init__(self, settings: Settings):
        url = settings.database_url
        kwargs: dict = {"echo": settings.db_echo}
        if url.startswith("sqlite"):
            if ":memory:" in url or "mode=memory" in url:
                # 인메모리 DB는 커넥션 하나를 공유해야 테이블이 유지됨
                kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_pre_ping"] = True

        self.engine: AsyncEngine = create_async_engine(url, **kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_maker = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)

    async def create_all(self) -> None:
        # 개발/테스트용. 운영 스키마는 Alembic 마이그레이션으로 관리
        import clinicalcanvas.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    database: Database = request.app.state.db
    async with database.session_maker() as session:
        yield session
