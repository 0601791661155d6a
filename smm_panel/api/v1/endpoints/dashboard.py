from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from smm_panel.core.database import get_db
from smm_panel.dependencies import get_current_user
from smm_panel.models import Order, OrderStatus, User, UserRole
from smm_panel.schemas.order import OrderOut
from smm_panel.services.orders import order_out, order_rows, scope_orders
from smm_panel.services.ledger import as_money

router = APIRouter()


def _count_when(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


@router.get("/stats")
def stats(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    if user.role == UserRole.CLIENT:
        row = (
            db.query(
                func.count(Order.id),
                _count_when(Order.status == OrderStatus.PENDING),
                _count_when(Order.status == OrderStatus.COMPLETED),
                _count_when(Order.status == OrderStatus.CANCELED),
                func.coalesce(
                    func.sum(case((Order.status == OrderStatus.COMPLETED, Order.price), else_=0)),
                    0,
                ),
            )
            .filter(Order.user_id == user.id)
            .one()
        )
        return {
            "total_orders": int(row[0] or 0),
            "pending_orders": int(row[1] or 0),
            "completed_orders": int(row[2] or 0),
            "failed_orders": int(row[3] or 0),
            "total_spent": as_money(row[4]),
            "balance": as_money(user.balance),
        }

    if user.role == UserRole.SELLER:
        row = (
            db.query(
                func.count(Order.id),
                _count_when(Order.status == OrderStatus.PENDING),
                _count_when(Order.status == OrderStatus.COMPLETED),
                _count_when(Order.status == OrderStatus.IN_PROGRESS),
            )
            .filter(Order.seller_id == user.id)
            .one()
        )
        return {
            "total_orders": int(row[0] or 0),
            "pending_orders": int(row[1] or 0),
            "completed_orders": int(row[2] or 0),
            "in_progress_orders": int(row[3] or 0),
            "balance": as_money(user.balance),
        }

    orders = db.query(
        func.count(Order.id),
        _count_when(Order.status == OrderStatus.PENDING),
        _count_when(Order.status == OrderStatus.COMPLETED),
        func.coalesce(func.sum(case((Order.status == OrderStatus.COMPLETED, Order.price), else_=0)), 0),
    ).one()
    users = db.query(
        func.count(User.id),
        _count_when(User.role == UserRole.CLIENT),
        _count_when(User.role == UserRole.SELLER),
    ).one()
    return {
        "total_orders": int(orders[0] or 0),
        "pending_orders": int(orders[1] or 0),
        "completed_orders": int(orders[2] or 0),
        "total_revenue": as_money(orders[3] or Decimal("0")),
        "total_users": int(users[0] or 0),
        "clients": int(users[1] or 0),
        "sellers": int(users[2] or 0),
    }


@router.get("/recent-orders", response_model=list[OrderOut])
def recent_orders(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    limit: int = Query(default=10, ge=1, le=100),
):
    rows = (
        scope_orders(order_rows(db), user)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .all()
    )
    include_client = user.role != UserRole.CLIENT
    return [order_out(row, include_client=include_client) for row in rows]
