from datetime import datetime, timedelta, timezone
import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from smm_panel.core.config import get_settings
from smm_panel.core.database import get_db
from smm_panel.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from smm_panel.dependencies import get_current_user
from smm_panel.middlewares.rate_limit import limiter
from smm_panel.models import Affiliate, AffiliateReferral, User, UserRole, UserStatus
from smm_panel.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenPair,
)
from smm_panel.schemas.common import Message
from smm_panel.schemas.user import UserOut
from smm_panel.services.audit import log_login
from smm_panel.services.email import send_password_reset_email
from smm_panel.services.settings_store import get_setting

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; Postgres returns aware ones.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _mask_email(value: str) -> str:
    try:
        local, domain = value.split("@", 1)
    except ValueError:
        return "***"
    if not local:
        return f"***@{domain}"
    return f"{local[:2]}***@{domain}"


def _token_pair(user: User) -> dict:
    role = user.role.value if hasattr(user.role, "value") else str(user.role)
    return {
        "access_token": create_access_token(str(user.id), role),
        "refresh_token": create_refresh_token(str(user.id), role),
        "token_type": "bearer",
    }


def _record_referral(db: Session, code: str | None, user: User) -> None:
    raw = (code or "").strip()
    if not raw:
        return
    affiliate = (
        db.query(Affiliate)
        .filter(Affiliate.referral_code == raw, Affiliate.status == "active")
        .first()
    )
    if not affiliate or affiliate.user_id == user.id:
        return
    db.add(AffiliateReferral(affiliate_id=affiliate.id, referred_user_id=user.id, status="pending"))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
def register(request: Request, payload: RegisterRequest, db: Session = Depends(get_db)):
    existing = (
        db.query(User)
        .filter(or_(User.username == payload.username, User.email == payload.email))
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail="Username or email already exists")

    user = User(
        username=payload.username,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        role=UserRole.CLIENT,
        status=UserStatus.ACTIVE,
        balance=0,
        last_login=_utcnow(),
    )
    db.add(user)
    db.flush()
    _record_referral(db, payload.referral_code, user)
    db.commit()
    db.refresh(user)

    log_login(db, request, user_id=user.id, email=user.email, status="success")
    logger.info("Registered user id=%s email=%s", user.id, _mask_email(user.email))
    return {**_token_pair(user), "user": user}


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.auth_rate_limit)
def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        log_login(db, request, user_id=user.id if user else None, email=payload.email, status="failed")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if user.status != UserStatus.ACTIVE:
        log_login(db, request, user_id=user.id, email=payload.email, status="failed")
        raise HTTPException(status_code=403, detail="Account is suspended or banned")

    user.last_login = _utcnow()
    db.commit()
    db.refresh(user)
    log_login(db, request, user_id=user.id, email=user.email, status="success")
    return {**_token_pair(user), "user": user}


@router.post("/refresh", response_model=TokenPair)
@limiter.limit("30/minute")
def refresh(request: Request, payload: RefreshRequest, db: Session = Depends(get_db)):
    try:
        decoded = decode_token(payload.refresh_token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if decoded.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    try:
        user_id = int(decoded.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    return TokenPair(**_token_pair(user))


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
@limiter.limit(settings.auth_rate_limit)
def forgot_password(request: Request, payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email).first()
    reset_token = None
    if user:
        reset_token = secrets.token_urlsafe(32)
        user.reset_token = reset_token
        user.reset_token_expires_at = _utcnow() + RESET_TOKEN_TTL
        db.commit()
        try:
            site_name = str(get_setting(db, "site_name", settings.app_name) or settings.app_name)
            send_password_reset_email(user.email, reset_token, site_name=site_name)
        except Exception as exc:
            logger.warning(
                "Password reset email send failed to=%s provider=%s error=%s",
                _mask_email(user.email),
                settings.email_provider,
                exc,
            )

    # Same answer for unknown emails so accounts can't be enumerated.
    message = "If the email exists, a reset link has been sent"
    env = (settings.environment or "").lower()
    if env and env != "production" and reset_token:
        return ForgotPasswordResponse(message=message, reset_token=reset_token)
    return ForgotPasswordResponse(message=message)


@router.post("/reset-password", response_model=Message)
@limiter.limit(settings.auth_rate_limit)
def reset_password(request: Request, payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.reset_token == payload.token).first()
    if not user or not user.reset_token_expires_at:
        raise HTTPException(status_code=400, detail="Invalid or expired token")
    if _as_utc(user.reset_token_expires_at) < _utcnow():
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    user.hashed_password = hash_password(payload.new_password)
    user.reset_token = None
    user.reset_token_expires_at = None
    db.commit()

    return Message(message="Password reset successful")
