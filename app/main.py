"""
FastAPI application entry point.
Builds the app around one ParkingStore, wires error handlers, request
logging, routers and the periodic status task.
"""

import asyncio
import contextlib
import time
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, settings
from app.exceptions import InternalError, ParkingError
from app.routers import admin, auth, health, parking
from app.services.auth_service import AuthService
from app.services.status_reporter import run_status_logger
from app.store import ParkingStore
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _register_error_handlers(app: FastAPI, cfg: Settings):
    @app.exception_handler(ParkingError)
    async def parking_error_handler(request: Request, exc: ParkingError):
        content = {"success": False, "error": exc.message, **exc.extra}
        if isinstance(exc, InternalError):
            cause = exc.__cause__
            content["message"] = str(cause) if (cfg.is_development and cause) else "Something went wrong"
        elif exc.status_code < 500:
            logger.info(f"{request.method} {request.url.path} → {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
        logger.warning(f"Rejected body on {request.url.path}: {details}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Invalid request body", "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            content = {"success": False, "error": "Not found",
                       "message": "The requested endpoint does not exist"}
        else:
            content = {"success": False, "error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Internal server error",
                "message": str(exc) if cfg.is_development else "Something went wrong",
            },
        )


def create_app(app_settings: Optional[Settings] = None, store: Optional[ParkingStore] = None) -> FastAPI:
    cfg = app_settings or settings

    app = FastAPI(
        title="Parking Occupancy Analytics API",
        description="Slot sensor ingestion, transition history and occupancy analytics.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = cfg
    app.state.store = store or ParkingStore(history_cap=cfg.HISTORY_CAP)
    app.state.auth = AuthService(cfg)
    app.state.auth.seed_admin()

    # ── CORS (dashboard is served from another origin) ───────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Request Timing Middleware ────────────────────────────────────────
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = round((time.time() - start) * 1000, 2)
        logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
        return response

    _register_error_handlers(app, cfg)

    # ── Routers ──────────────────────────────────────────────────────────
    app.include_router(parking.router, prefix=cfg.API_PREFIX, tags=["🅿️  Parking status"])
    app.include_router(admin.router,   prefix=cfg.API_PREFIX, tags=["📊 Admin analytics"])
    app.include_router(auth.router,    prefix=cfg.API_PREFIX, tags=["🔑 Auth"])
    app.include_router(health.router,  prefix=cfg.API_PREFIX, tags=["💚 Health"])

    # ── Startup / Shutdown ───────────────────────────────────────────────
    @app.on_event("startup")
    async def startup():
        logger.info("🚀 Parking backend starting up...")
        logger.info(f"Auth required: {cfg.AUTH_REQUIRED} | Extended analytics: {cfg.EXTENDED_ANALYTICS}")
        logger.info(f"History cap: {cfg.HISTORY_CAP} | Local offset: UTC+{cfg.LOCAL_UTC_OFFSET_HOURS}")
        logger.info(f"🌐 Listening on http://{cfg.BACKEND_IP}:{cfg.BACKEND_PORT}{cfg.API_PREFIX}")
        app.state.status_task = asyncio.create_task(
            run_status_logger(app.state.store, cfg.STATUS_LOG_INTERVAL_SECONDS)
        )

    @app.on_event("shutdown")
    async def shutdown():
        logger.info("🛑 Parking backend shutting down...")
        task = getattr(app.state, "status_task", None)
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    return app


app = create_app()
