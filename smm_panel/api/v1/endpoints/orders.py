from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from smm_panel.core.config import get_settings
from smm_panel.core.database import get_db
from smm_panel.dependencies import get_current_user, require_client, require_staff
from smm_panel.middlewares.rate_limit import limiter
from smm_panel.models import Order, OrderStatus, Service, User, UserRole
from smm_panel.schemas.order import OrderCreate, OrderCreated, OrderOut, OrdersResponse, OrderStatusUpdate
from smm_panel.services.audit import log_api_call
from smm_panel.services.orders import order_out, order_rows, place_order, scope_orders, update_order_status
from smm_panel.utils.pagination import check_paging, page_payload

settings = get_settings()
router = APIRouter()


def _coerce_status(value: Optional[str]) -> Optional[OrderStatus]:
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    for member in OrderStatus:
        if raw.lower() == member.value or raw.upper() == member.name:
            return member
    raise HTTPException(status_code=400, detail="Invalid status")


@router.post("/", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.order_rate_limit)
def create_order(
    request: Request,
    payload: OrderCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_client),
):
    placed = place_order(
        db,
        user,
        service_id=payload.service_id,
        link=payload.link,
        quantity=payload.quantity,
        coupon_code=payload.coupon,
    )
    log_api_call(
        db,
        request,
        user_id=user.id,
        request_data=payload.model_dump(),
        response_data={"order_id": placed.order.id, "price": str(placed.order.price)},
        status_code=201,
    )
    row = order_rows(db).filter(Order.id == placed.order.id).first()
    return {"order": order_out(row, include_client=False), "discount": placed.discount, "balance": placed.balance}


@router.get("/", response_model=OrdersResponse)
def list_orders(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    status: Optional[str] = None,
    search: Optional[str] = None,
    unassigned: bool = False,
    page: int = 1,
    page_size: int = 20,
):
    check_paging(page, page_size)
    status_enum = _coerce_status(status)

    query = scope_orders(order_rows(db), user, unassigned=unassigned)
    if status_enum is not None:
        query = query.filter(Order.status == status_enum)
    if search:
        needle = f"%{search.strip()}%"
        query = query.filter(or_(Service.name.ilike(needle), Order.link.ilike(needle)))

    total = query.count()
    rows = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    include_client = user.role != UserRole.CLIENT
    items = [order_out(row, include_client=include_client) for row in rows]
    return page_payload(items, total, page, page_size)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    row = scope_orders(order_rows(db), user).filter(Order.id == order_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_out(row, include_client=user.role != UserRole.CLIENT)


@router.patch("/{order_id}/status", response_model=OrderOut)
def change_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    # Lock the order so two concurrent cancels cannot both refund.
    order = db.query(Order).filter(Order.id == order_id).with_for_update().first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    update_order_status(
        db,
        order,
        staff,
        payload.status,
        start_count=payload.start_count,
        remains=payload.remains,
    )
    row = order_rows(db).filter(Order.id == order.id).first()
    return order_out(row)
