import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from smm_panel.core.database import get_db
from smm_panel.core.security import generate_api_key, hash_password, verify_password
from smm_panel.dependencies import get_current_user, require_admin
from smm_panel.models import Affiliate, AffiliateReferral, User, UserRole, UserStatus
from smm_panel.schemas.auth import ChangePasswordRequest
from smm_panel.schemas.common import Message
from smm_panel.schemas.user import (
    AffiliateOut,
    ApiKeyResponse,
    UpdateProfileRequest,
    UserOut,
    UsersResponse,
    UserStatusUpdate,
)
from smm_panel.utils.pagination import check_paging, page_payload

router = APIRouter()
logger = logging.getLogger(__name__)


def _coerce_enum(enum_cls, value: Optional[str], label: str):
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    for member in enum_cls:
        if raw.lower() == member.value or raw.upper() == member.name:
            return member
    raise HTTPException(status_code=400, detail=f"Invalid {label}")


@router.get("/profile", response_model=UserOut)
def get_profile(user: User = Depends(get_current_user)):
    return user


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: UpdateProfileRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if payload.username is None and payload.email is None:
        raise HTTPException(status_code=400, detail="No fields to update")

    clauses = []
    if payload.username is not None:
        clauses.append(User.username == payload.username)
    if payload.email is not None:
        clauses.append(User.email == payload.email)
    clash = db.query(User).filter(or_(*clauses), User.id != user.id).first()
    if clash:
        raise HTTPException(status_code=400, detail="Username or email already exists")

    if payload.username is not None:
        user.username = payload.username
    if payload.email is not None:
        user.email = payload.email
    db.commit()
    db.refresh(user)
    return user


@router.put("/password", response_model=Message)
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    user.hashed_password = hash_password(payload.new_password)
    db.commit()
    return Message(message="Password updated successfully")


@router.post("/api-key", response_model=ApiKeyResponse)
def rotate_api_key(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    user.api_key = generate_api_key()
    db.commit()
    logger.info("API key rotated for user=%s", user.id)
    return ApiKeyResponse(api_key=user.api_key)


def _affiliate_out(db: Session, affiliate: Affiliate) -> AffiliateOut:
    referrals = (
        db.query(func.count(AffiliateReferral.id))
        .filter(AffiliateReferral.affiliate_id == affiliate.id)
        .scalar()
        or 0
    )
    return AffiliateOut(referral_code=affiliate.referral_code, status=affiliate.status, referrals=referrals)


@router.get("/affiliate", response_model=AffiliateOut)
def get_affiliate(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    affiliate = db.query(Affiliate).filter(Affiliate.user_id == user.id).first()
    if not affiliate:
        raise HTTPException(status_code=404, detail="Affiliate account not found")
    return _affiliate_out(db, affiliate)


@router.post("/affiliate", response_model=AffiliateOut)
def join_affiliate(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    affiliate = db.query(Affiliate).filter(Affiliate.user_id == user.id).first()
    if not affiliate:
        affiliate = Affiliate(user_id=user.id, referral_code=secrets.token_hex(6), status="active")
        db.add(affiliate)
        db.commit()
        db.refresh(affiliate)
    return _affiliate_out(db, affiliate)


@router.get("/", response_model=UsersResponse)
def list_users(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    role: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
):
    check_paging(page, page_size)
    role_enum = _coerce_enum(UserRole, role, "role")
    status_enum = _coerce_enum(UserStatus, status, "status")

    query = db.query(User)
    if role_enum is not None:
        query = query.filter(User.role == role_enum)
    if status_enum is not None:
        query = query.filter(User.status == status_enum)
    if search:
        needle = f"%{search.strip()}%"
        query = query.filter(or_(User.username.ilike(needle), User.email.ilike(needle)))

    total = query.count()
    items = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return page_payload(items, total, page, page_size)


@router.patch("/{user_id}/status", response_model=UserOut)
def update_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot change your own status")
    target = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise HTTPException(status_code=404, detail="User not found")

    target.status = payload.status
    db.commit()
    db.refresh(target)
    logger.info("User %s status set to %s by admin=%s", target.id, payload.status.value, admin.id)
    return target
