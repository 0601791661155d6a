from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException
from smm_panel.api.v1.routes import router as api_router
from smm_panel.core.config import get_settings, parse_cors_origins
import logging
import time
from urllib.parse import urlparse
from smm_panel.core.database import Base, engine, SessionLocal
from smm_panel.core.logging import configure_logging
from smm_panel.middlewares.rate_limit import limiter
from smm_panel.models import User, UserRole
from smm_panel.pages import page_file, router as pages_router, static_root


settings = get_settings()

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
_started_at = time.time()


@app.exception_handler(SQLAlchemyTimeoutError)
async def sqlalchemy_timeout_handler(request, exc):
    logger.warning("Database pool timeout on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Service is busy. Please retry in a moment."},
    )


@app.exception_handler(StarletteHTTPException)
async def not_found_page_handler(request: Request, exc: StarletteHTTPException):
    # API callers always get JSON; browsers hitting an unknown page get 404.html.
    if exc.status_code == 404 and not request.url.path.startswith(settings.api_v1_prefix):
        page = page_file("404.html")
        if page is not None:
            return FileResponse(page, status_code=404, media_type="text/html")
    return await http_exception_handler(request, exc)


def _origin_from_url(raw: str) -> str | None:
    text = str(raw or "").strip()
    if not text:
        return None
    parsed = urlparse(text)
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return None


frontend_origin = _origin_from_url(settings.frontend_base_url)
allow_origins = list(
    dict.fromkeys(
        parse_cors_origins(settings.cors_origins or "")
        + ([frontend_origin] if frontend_origin else [])
    )
)
logger.info("CORS allow_origins=%s", allow_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_v1_prefix)
app.include_router(pages_router)
if static_root().is_dir():
    app.mount("/static", StaticFiles(directory=str(static_root())), name="static")


def _bootstrap_admins() -> None:
    raw = (settings.bootstrap_admin_emails or "").strip()
    if not raw:
        return

    emails = [item.strip().lower() for item in raw.split(",") if item.strip()]
    if not emails:
        return

    db = SessionLocal()
    try:
        updated = 0
        missing: list[str] = []
        for email in emails:
            user = db.query(User).filter(User.email == email).first()
            if not user:
                missing.append(email)
                continue
            if user.role != UserRole.ADMIN:
                user.role = UserRole.ADMIN
                updated += 1
        if updated:
            db.commit()
            logger.info("Bootstrapped admin role for %s user(s).", updated)
        if missing:
            logger.warning("BOOTSTRAP_ADMIN_EMAILS users not found: %s", ", ".join(missing))
    except Exception as exc:
        logger.warning("Admin bootstrap failed: %s", exc)
    finally:
        db.close()


@app.on_event("startup")
def ensure_tables():
    if not settings.auto_create_tables:
        _bootstrap_admins()
        return

    try:
        Base.metadata.create_all(bind=engine)
    except Exception as exc:
        logger.warning("DB unavailable on startup, skipping table creation: %s", exc)
    _bootstrap_admins()


@app.get("/healthz")
@limiter.exempt
def healthz():
    return {
        "status": "ok",
        "uptime_seconds": int(max(0, time.time() - _started_at)),
        "service": settings.app_name,
    }


@app.get("/readyz")
@limiter.exempt
def readyz():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "ready",
            "uptime_seconds": int(max(0, time.time() - _started_at)),
        }
    except Exception as exc:
        logger.warning("Readiness DB check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "detail": "database_unavailable"},
        )
    finally:
        db.close()
