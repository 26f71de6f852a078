#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Heatmap Tracker - FastAPI Application
JSON API and HTML dashboard for topics, heatmaps and statistics

Version: 1.0.0
"""

import time
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import PersistenceError, TopicNotFoundError, ValidationError
from core.storage import TopicStore
from dashboard.api import data, pages, topics
from dashboard.config import DashboardSettings, get_settings
from dashboard.schemas import HealthCheck
from services import ServiceManager
from utils.logger import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[DashboardSettings] = None, store: Optional[TopicStore] = None,
               clock: Optional[Callable[[], date]] = None) -> FastAPI:
    """Application factory

    ``store`` and ``clock`` override what the settings would build; tests
    use them to pin the data and the current date.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.VERSION}...")
        app.state.start_time = time.time()
        app.state.services = ServiceManager(settings, store=store, clock=clock).initialize_services()
        logger.info(f"✅ {settings.APP_NAME} ready ({settings.STORAGE_BACKEND} storage)")

        yield

        logger.info(f"🛑 Stopping {settings.APP_NAME}...")
        app.state.services.close_services()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Personal habit and metric tracker with contribution heatmaps",
        version=settings.VERSION,
        docs_url=settings.docs_url,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.start_time = time.time()

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log every request with its status and duration"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    # ===== ERROR HANDLERS =====

    @app.exception_handler(TopicNotFoundError)
    async def topic_not_found_handler(request: Request, exc: TopicNotFoundError):
        return JSONResponse(
            status_code=404,
            content={"detail": "Topic not found", "topic_id": exc.topic_id, "status_code": 404}
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=400,
            content={**exc.to_dict(), "status_code": 400}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Invalid request",
                "errors": jsonable_encoder(exc.errors()),
                "status_code": 400
            }
        )

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error(f"❌ Storage failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Storage failure", "status_code": 500}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "status_code": exc.status_code},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.exception(f"Internal server error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "status_code": 500}
        )

    # ===== ROUTES =====

    app.include_router(topics.router)
    app.include_router(data.router)
    app.include_router(pages.router)

    @app.get("/health", response_model=HealthCheck, tags=["system"])
    async def health_check(request: Request):
        services: ServiceManager = request.app.state.services
        health = services.health_check()
        return HealthCheck(
            status=health["status"],
            service=settings.APP_NAME,
            version=settings.VERSION,
            timestamp=time.time(),
            details={
                **health["services"],
                "uptime_seconds": round(time.time() - request.app.state.start_time, 1)
            }
        )

    return app


def run_dashboard(settings: Optional[DashboardSettings] = None, host: Optional[str] = None,
                  port: Optional[int] = None, reload: bool = False):
    """Run the dashboard under uvicorn"""
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.LOG_FILE)

    host = host or settings.HOST
    port = port or settings.PORT

    logger.info(f"🌐 Dashboard on http://{host}:{port}")
    logger.info(f"📊 Storage: {settings.STORAGE_BACKEND} ({settings.DATA_FILE})")
    logger.info(f"🔄 Reload: {reload}")

    uvicorn.run(
        "dashboard.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="debug" if settings.DEBUG else "info",
        server_header=False
    )
