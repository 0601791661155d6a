from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Query, Session

from smm_panel.models import (
    Category,
    Order,
    OrderStatus,
    Service,
    TransactionType,
    User,
    UserRole,
)
from smm_panel.services.coupons import compute_discount, find_usable_coupon, record_coupon_usage
from smm_panel.services.ledger import as_money, credit_balance, debit_balance, lock_user
from smm_panel.services.pricing import calculate_order_price, unit_price_for_role
from smm_panel.services.settings_store import is_maintenance_mode

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {
            OrderStatus.PROCESSING,
            OrderStatus.IN_PROGRESS,
            OrderStatus.COMPLETED,
            OrderStatus.PARTIAL,
            OrderStatus.CANCELED,
        }
    ),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED, OrderStatus.PARTIAL, OrderStatus.CANCELED}
    ),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.PARTIAL, OrderStatus.CANCELED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.PARTIAL: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

REFUND_STATES = frozenset({OrderStatus.CANCELED, OrderStatus.REFUNDED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


@dataclass
class PlacedOrder:
    order: Order
    discount: Decimal
    balance: Decimal


def place_order(
    db: Session,
    user: User,
    *,
    service_id: int,
    link: str,
    quantity: int,
    coupon_code: Optional[str] = None,
) -> PlacedOrder:
    """
    Validate, price and persist a new order in one commit.

    The buyer row is locked before the balance check so concurrent orders
    from the same account serialize on it. The order, its ledger debit and
    any coupon usage land together or not at all.
    """
    if user.role != UserRole.ADMIN and is_maintenance_mode(db):
        raise HTTPException(status_code=503, detail="Ordering is temporarily disabled for maintenance")

    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    category = db.query(Category).filter(Category.id == service.category_id).first()
    if service.status != "active" or (category is not None and category.status != "active"):
        raise HTTPException(status_code=400, detail="Service is not available")
    if quantity < service.min_quantity or quantity > service.max_quantity:
        raise HTTPException(
            status_code=400,
            detail=f"Quantity must be between {service.min_quantity} and {service.max_quantity}",
        )

    price = calculate_order_price(unit_price_for_role(service, user.role), quantity)
    coupon = find_usable_coupon(db, coupon_code)
    discount = compute_discount(coupon, price) if coupon else Decimal("0")
    final_price = max(Decimal("0"), price - discount)

    buyer = lock_user(db, user.id)
    if not buyer:
        raise HTTPException(status_code=404, detail="User not found")
    available = as_money(buyer.balance)
    if available < final_price:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Insufficient balance",
                "required": str(final_price),
                "available": str(available),
            },
        )

    order = Order(
        user_id=buyer.id,
        service_id=service.id,
        link=link,
        quantity=quantity,
        price=final_price,
        status=OrderStatus.PENDING,
        start_count=0,
        remains=quantity,
    )
    try:
        db.add(order)
        db.flush()
        if final_price > 0:
            debit_balance(
                db,
                buyer,
                final_price,
                TransactionType.ORDER,
                f"Order #{order.id} - {service.name}",
                order_id=order.id,
            )
        if coupon:
            record_coupon_usage(db, coupon, user_id=buyer.id, order_id=order.id, discount=discount)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info(
        "Order placed id=%s user=%s service=%s qty=%s price=%s discount=%s",
        order.id,
        buyer.id,
        service.id,
        quantity,
        final_price,
        discount,
    )
    return PlacedOrder(order=order, discount=discount, balance=as_money(buyer.balance))


def update_order_status(
    db: Session,
    order: Order,
    actor: User,
    target: OrderStatus,
    *,
    start_count: Optional[int] = None,
    remains: Optional[int] = None,
) -> Order:
    if actor.role == UserRole.SELLER and order.seller_id not in (None, actor.id):
        raise HTTPException(status_code=403, detail="Order is assigned to another seller")

    current = OrderStatus(order.status)
    if not can_transition(current, target):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change order status from {current.value} to {target.value}",
        )

    if current == target:
        # Re-sending the current status only updates the counters.
        if start_count is not None:
            order.start_count = start_count
        if remains is not None:
            order.remains = remains
        db.commit()
        db.refresh(order)
        return order

    try:
        if actor.role == UserRole.SELLER and order.seller_id is None:
            order.seller_id = actor.id
        order.status = target
        if start_count is not None:
            order.start_count = start_count
        if remains is not None:
            order.remains = remains
        if target == OrderStatus.COMPLETED:
            order.completed_at = _utcnow()
            if remains is None:
                order.remains = 0

        if target in REFUND_STATES and current not in REFUND_STATES:
            amount = as_money(order.price)
            if amount > 0:
                owner = lock_user(db, order.user_id)
                if not owner:
                    raise HTTPException(status_code=404, detail="Order owner not found")
                credit_balance(
                    db,
                    owner,
                    amount,
                    TransactionType.REFUND,
                    f"Refund for order #{order.id}",
                    order_id=order.id,
                    created_by=actor.id,
                )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info("Order %s status %s -> %s by user=%s", order.id, current.value, target.value, actor.id)
    return order


def order_rows(db: Session) -> Query:
    """Orders joined with the names listings show next to them."""
    return (
        db.query(
            Order,
            Service.name.label("service_name"),
            Category.name.label("category_name"),
            User.username.label("username"),
            User.email.label("email"),
        )
        .outerjoin(Service, Order.service_id == Service.id)
        .outerjoin(Category, Service.category_id == Category.id)
        .outerjoin(User, Order.user_id == User.id)
    )


def order_out(row, include_client: bool = True) -> dict:
    order, service_name, category_name, username, email = row
    return {
        "id": order.id,
        "user_id": order.user_id,
        "service_id": order.service_id,
        "seller_id": order.seller_id,
        "service_name": service_name,
        "category_name": category_name,
        "username": username if include_client else None,
        "email": email if include_client else None,
        "link": order.link,
        "quantity": order.quantity,
        "price": order.price,
        "status": order.status,
        "start_count": order.start_count or 0,
        "remains": order.remains or 0,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "completed_at": order.completed_at,
    }


def scope_orders(query: Query, user: User, unassigned: bool = False) -> Query:
    if user.role == UserRole.CLIENT:
        return query.filter(Order.user_id == user.id)
    if user.role == UserRole.SELLER:
        if unassigned:
            return query.filter(Order.seller_id.is_(None), Order.status == OrderStatus.PENDING)
        return query.filter(Order.seller_id == user.id)
    return query
