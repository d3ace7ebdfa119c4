# clinicalcanvas/main.py
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinicalcanvas import __version__
from clinicalcanvas.api.routers import analytics, appointments, auth, clients, documents, invoices, notes
from clinicalcanvas.config import Settings
from clinicalcanvas.db import Database
from clinicalcanvas.errors import setup_exception_handlers
from clinicalcanvas.services.auth_service import PasswordHasher, TokenService

logger = logging.getLogger(__name__)

API_ENDPOINTS = {
    "auth": "/api/auth/register, /api/auth/login, /api/auth/me",
    "clients": "/api/clients",
    "appointments": "/api/appointments",
    "invoices": "/api/invoices",
    "notes": "/api/notes",
    "documents": "/api/documents",
    "analytics": "/api/analytics/dashboard",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    db: Database = app.state.db
    # 앱 시작 시
    if settings.create_tables:
        await db.create_all()
    logger.info(f"ClinicalCanvas API starting (cors origins: {', '.join(settings.cors_origins)})")
    try:
        yield
    finally:
        # 앱 종료 시
        await db.dispose()
        logger.info("ClinicalCanvas API stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(title="ClinicalCanvas API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = Database(settings)
    app.state.password_hasher = PasswordHasher(settings.password_hash_rounds)
    app.state.token_service = TokenService.from_settings(settings)

    # CORS 미들웨어를 가장 먼저 등록
    origins = list(settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # 와일드카드 origin 과 credentials 는 함께 쓸 수 없음
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(clients.router)
    app.include_router(appointments.router)
    app.include_router(invoices.router)
    app.include_router(notes.router)
    app.include_router(documents.router)
    app.include_router(analytics.router)

    @app.get("/api", tags=["meta"])
    async def index():
        return {
            "message": "ClinicalCanvas API",
            "version": __version__,
            "endpoints": API_ENDPOINTS,
        }

    @app.get("/api/health", tags=["meta"])
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app
