# liftlog/main.py
import os
import time
import logging
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from liftlog.errors import WorkoutError
from liftlog.routers.exercises import router as exercises_router
from liftlog.db import SessionLocal, init_db  # for healthz DB check
from liftlog.settings import get_settings

log = logging.getLogger("uvicorn")

STATUS_BY_KIND = {
    "ValidationError": 400,
    "NotFound": 404,
    "ReferentialError": 500,
    "WriteFailed": 500,
    "StorageFault": 500,
}

@asynccontextmanager
async def lifespan(app: FastAPI):
    if get_settings().CREATE_TABLES_ON_STARTUP:
        init_db()
        log.info("exercises and sets tables ready")
    yield

app = FastAPI(
    title="liftlog API",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "exercises", "description": "Exercises with their sets"},
    ],
)


# CORS (relax for local dev; tighten origins in prod via env)
ALLOW_ORIGINS = os.getenv("ALLOW_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = req_id
    log.info("rid=%s %s %s -> %s in %.1fms",
             req_id, request.method, request.url.path, response.status_code, duration_ms)
    return response

@app.exception_handler(WorkoutError)
async def workout_error_handler(request: Request, exc: WorkoutError):
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        log.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())

@app.get("/")
def root():
    return {"ok": True, "name": "liftlog API"}

@app.get("/ping")
def ping():
    return {"pong": True}

@app.get("/healthz")
def healthz():
    # Quick DB sanity check
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception as e:
        return {"status": "degraded", "error": str(e)}

@app.get("/version")
def version():
    return {"version": os.getenv("API_VERSION", "dev")}

# Routers
app.include_router(exercises_router)
