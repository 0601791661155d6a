import csv
from datetime import date, datetime, time, timezone
import io
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from smm_panel.core.database import get_db
from smm_panel.dependencies import require_admin
from smm_panel.models import ApiLog, Coupon, LoginLog, Order, OrderStatus, User
from smm_panel.schemas.admin import (
    ApiLogsResponse,
    check_coupon_terms,
    CouponIn,
    CouponOut,
    CouponUpdate,
    LoginLogsResponse,
    SettingsUpdate,
)
from smm_panel.schemas.common import Message
from smm_panel.schemas.order import OrdersResponse
from smm_panel.services.orders import order_out, order_rows
from smm_panel.services.settings_store import load_settings, save_settings
from smm_panel.utils.pagination import check_paging, page_payload

router = APIRouter()
logger = logging.getLogger(__name__)

EXPORT_HEADER = ["ID", "Date", "Status", "Service", "Client", "Email", "Link", "Quantity", "Price"]


def _coerce_order_status(value: Optional[str]) -> Optional[OrderStatus]:
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    for member in OrderStatus:
        if raw.lower() == member.value or raw.upper() == member.name:
            return member
    raise HTTPException(status_code=400, detail="Invalid status")


def _as_utc_start(d: date) -> datetime:
    return datetime.combine(d, time.min).replace(tzinfo=timezone.utc)


def _as_utc_end(d: date) -> datetime:
    return datetime.combine(d, time.max).replace(tzinfo=timezone.utc)


@router.get("/settings")
def get_settings_map(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return load_settings(db)


@router.put("/settings", response_model=Message)
def update_settings(payload: SettingsUpdate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    if not payload.settings:
        raise HTTPException(status_code=400, detail="No settings provided")
    try:
        changed = save_settings(db, payload.settings)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    logger.info("Admin %s updated %s setting(s)", admin.id, changed)
    return Message(message="Settings updated successfully")


@router.get("/logs/login", response_model=LoginLogsResponse)
def login_logs(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    status: Optional[str] = None,
    user_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 50,
):
    check_paging(page, page_size)
    query = db.query(LoginLog)
    if status:
        query = query.filter(LoginLog.status == status.strip().lower())
    if user_id:
        query = query.filter(LoginLog.user_id == user_id)

    total = query.count()
    items = (
        query.order_by(LoginLog.created_at.desc(), LoginLog.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return page_payload(items, total, page, page_size)


@router.get("/logs/api", response_model=ApiLogsResponse)
def api_logs(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    user_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 50,
):
    check_paging(page, page_size)
    query = db.query(ApiLog)
    if user_id:
        query = query.filter(ApiLog.user_id == user_id)

    total = query.count()
    items = (
        query.order_by(ApiLog.created_at.desc(), ApiLog.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return page_payload(items, total, page, page_size)


@router.get("/logs/orders", response_model=OrdersResponse)
def order_logs(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = 50,
):
    check_paging(page, page_size)
    status_enum = _coerce_order_status(status)
    query = order_rows(db)
    if status_enum is not None:
        query = query.filter(Order.status == status_enum)

    total = query.count()
    rows = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return page_payload([order_out(row) for row in rows], total, page, page_size)


@router.get("/export/orders")
def export_orders(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    status: Optional[str] = None,
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
):
    status_enum = _coerce_order_status(status)
    query = order_rows(db)
    if status_enum is not None:
        query = query.filter(Order.status == status_enum)
    if start_date:
        query = query.filter(Order.created_at >= _as_utc_start(start_date))
    if end_date:
        query = query.filter(Order.created_at <= _as_utc_end(end_date))

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_HEADER)
    for order, service_name, _category_name, username, email in query.order_by(Order.created_at.desc(), Order.id.desc()):
        writer.writerow(
            [
                order.id,
                order.created_at.isoformat() if order.created_at else "",
                order.status.value if hasattr(order.status, "value") else order.status,
                service_name or "",
                username or "",
                email or "",
                order.link,
                order.quantity,
                order.price,
            ]
        )

    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="orders.csv"'},
    )


@router.get("/coupons", response_model=list[CouponOut])
def list_coupons(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return db.query(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()).all()


@router.post("/coupons", response_model=CouponOut, status_code=status.HTTP_201_CREATED)
def create_coupon(payload: CouponIn, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    code = payload.code.strip()
    if db.query(Coupon).filter(Coupon.code == code).first():
        raise HTTPException(status_code=400, detail="Coupon code already exists")

    coupon = Coupon(**payload.model_dump(exclude={"code"}), code=code, used_count=0)
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


@router.patch("/coupons/{coupon_id}", response_model=CouponOut)
def update_coupon(
    coupon_id: int,
    payload: CouponUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")

    changes = payload.model_dump(exclude_unset=True)
    merged = {
        field: changes.get(field, getattr(coupon, field))
        for field in ("discount_value", "valid_from", "valid_until")
    }
    try:
        check_coupon_terms(coupon.discount_type, **merged)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    for field, value in changes.items():
        setattr(coupon, field, value)
    db.commit()
    db.refresh(coupon)
    return coupon
