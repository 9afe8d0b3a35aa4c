"""
LearnHub API - Main Application
Courses, progress tracking, certificates and referrals
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional
import logging

from learnhub.core import config
from learnhub.core.database import create_client, create_indexes
from learnhub.core.errors import register_error_handlers
from learnhub.core.logging_config import setup_logging
from learnhub.notifications.notifier import Notifier, build_notifier

from learnhub.users.router import router as users_router
from learnhub.courses.router import router as courses_router
from learnhub.progress.router import router as progress_router
from learnhub.certificates.router import router as certificates_router
from learnhub.referrals.router import router as referrals_router

logger = logging.getLogger(__name__)


def create_app(db: Optional[AsyncIOMotorDatabase] = None, notifier: Optional[Notifier] = None) -> FastAPI:
    """
    Build the application
    db/notifier are injected by tests; production connects on startup
    """
    setup_logging(config.LOG_LEVEL)

    app = FastAPI(title="LearnHub API")
    app.state.client = None
    app.state.db = db
    app.state.notifier = notifier or build_notifier()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # ==================== ROUTER REGISTRATION ====================
    app.include_router(users_router, prefix="/api")
    app.include_router(courses_router, prefix="/api")
    app.include_router(progress_router, prefix="/api")
    app.include_router(certificates_router, prefix="/api")
    app.include_router(referrals_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        if app.state.db is None:
            app.state.client = create_client()
            app.state.db = app.state.client[config.MONGO_DB_NAME]
        await create_indexes(app.state.db)
        logger.info("LearnHub started")

    @app.on_event("shutdown")
    async def shutdown_event():
        if app.state.client is not None:
            app.state.client.close()

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
