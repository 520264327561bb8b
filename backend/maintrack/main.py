# backend/maintrack/main.py
import json
import logging
import os

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.api import UTF8JSONResponse, fail, ok
from .core.db import Base, engine, get_db
from .core.errors import AppError
from . import models  # noqa: F401  (metadata dolsun)

# --- Router importları ---
from .routers.auth import router as auth_router
from .routers.equipment import router as equipment_router
from .routers.reports import router as reports_router
from .routers.requests import router as requests_router
from .routers.teams import router as teams_router
from .routers.users import router as users_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="MAINTRACK", default_response_class=UTF8JSONResponse)

# JSON Content-Type charset düzeltmesi
@app.middleware("http")
async def _force_json_charset(request, call_next):
    resp = await call_next(request)
    ct = resp.headers.get("content-type", "")
    if ct.lower().startswith("application/json") and "charset=" not in ct.lower():
        resp.headers["content-type"] = "application/json; charset=utf-8"
    return resp


# -----------------------------
# Global hata zarfı
# -----------------------------
HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
}

@app.exception_handler(AppError)
async def app_error_to_envelope(request: Request, exc: AppError):
    return fail(exc.code, exc.message, status_code=exc.status_code, details=exc.details)

@app.exception_handler(StarletteHTTPException)
async def http_exception_to_envelope(request: Request, exc: StarletteHTTPException):
    return fail(
        HTTP_CODES.get(exc.status_code, "ERROR"),
        str(exc.detail) if exc.detail else exc.__class__.__name__,
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_to_envelope(request: Request, exc: RequestValidationError):
    return fail("VALIDATION_ERROR", "Validation error", status_code=422, details=exc.errors())

@app.exception_handler(IntegrityError)
async def integrity_error_to_envelope(request: Request, exc: IntegrityError):
    logger.warning("integrity error on %s: %s", request.url.path, getattr(exc, "orig", exc))
    return fail("CONFLICT", "Duplicate or conflicting record", status_code=409)

@app.exception_handler(Exception)
async def unhandled_to_envelope(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return fail("INTERNAL_ERROR", "Internal server error", status_code=500)


# -----------------------------
# CORS yapılandırması (.env)
# -----------------------------
def _parse_origins(env_val):
    if not env_val or env_val.strip() == "*":
        return ["*"]
    try:
        parsed = json.loads(env_val)
        if isinstance(parsed, list):
            return [str(x) for x in parsed]
    except ValueError:
        pass
    return [s.strip() for s in env_val.split(",") if s.strip()]

ALLOWED_ORIGINS = _parse_origins(os.getenv("CORS_ALLOW_ORIGINS", "*"))
logger.info("CORS allow_origins = %s", ALLOWED_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOWED_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- startup: tablolar yoksa oluştur ----
def _auto_create_enabled() -> bool:
    return os.getenv("AUTO_CREATE_TABLES", "1").strip().lower() in ("1", "true", "yes", "on")

@app.on_event("startup")
def _ensure_tables():
    if not _auto_create_enabled():
        return
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
    except Exception:
        logger.exception("table create failed")

# ---- Sağlık uçları ----
@app.get("/health")
def health():
    return ok({"service": "MAINTRACK"})

@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    val = db.execute(text("SELECT 1")).scalar()
    return ok({"db": "ok", "select1": val})


# =========================
# Router kayıtları
# =========================
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(equipment_router)
app.include_router(teams_router)
app.include_router(requests_router)
app.include_router(reports_router)
