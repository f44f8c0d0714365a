# skillswap/main.py
import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise import Tortoise

from skillswap.config import settings
from skillswap.core.db import init_db, close_db
from skillswap.core.errors import InternalError, SkillSwapError
from skillswap.core.relay import relay

from skillswap.api.routers import auth, users, skills, swaps, ratings, messages, admin
from skillswap.api.routers.ws import router as ws_router

from skillswap.core.bootstrap import ensure_default_admin
logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_heartbeat_task: Optional[asyncio.Task] = None


# -------- error rendering --------
@app.exception_handler(SkillSwapError)
async def skillswap_error_handler(request: Request, exc: SkillSwapError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"code": "VALIDATION_ERROR", "message": "Validation failed", "fields": fields}},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[api] unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": InternalError().to_detail()})


# -------- lifecycle --------
@app.on_event("startup")
async def on_startup():
    global _heartbeat_task
    await init_db()
    # Ensure there's a default admin account on first run
    await ensure_default_admin()
    _heartbeat_task = asyncio.create_task(relay.run_heartbeat(settings.heartbeat_interval_sec))
    logger.info("[startup] %s ready (env=%s, heartbeat every %ss)",
                settings.APP_NAME, settings.env, settings.heartbeat_interval_sec)


@app.on_event("shutdown")
async def on_shutdown():
    global _heartbeat_task
    if _heartbeat_task is not None:
        _heartbeat_task.cancel()
        try:
            await _heartbeat_task
        except asyncio.CancelledError:
            pass
        _heartbeat_task = None
    await relay.close_all()
    await close_db()


# REST
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(skills.router, prefix="/api")
app.include_router(swaps.router, prefix="/api")
app.include_router(ratings.router, prefix="/api")
app.include_router(messages.router, prefix="/api")
app.include_router(admin.router, prefix="/api")

# WebSocket
app.include_router(ws_router)


@app.get("/api/health")
async def health():
    db_ok = True
    try:
        await Tortoise.get_connection("default").execute_query("SELECT 1")
    except Exception:
        db_ok = False
    return {
        "success": True,
        "data": {
            "status": "ok" if db_ok else "degraded",
            "database": "connected" if db_ok else "unavailable",
            "onlineUsers": len(relay),
        },
    }
