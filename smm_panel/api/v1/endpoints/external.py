"""
Key-authenticated API for resellers and automation.

Callers pass their personal key as ``X-API-Key`` (or ``?api_key=``). Every
request, failed ones included, is written to ``api_logs``.
"""

from decimal import Decimal, InvalidOperation
import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from smm_panel.core.config import get_settings
from smm_panel.core.database import get_db
from smm_panel.dependencies import get_api_user
from smm_panel.middlewares.rate_limit import limiter
from smm_panel.models import Category, Order, Service, User, UserRole
from smm_panel.schemas.external import (
    ExternalOrderCreate,
    ExternalOrderCreated,
    ExternalOrderStatus,
    ExternalStatusUpdate,
    ServicesSyncRequest,
    ServicesSyncResponse,
)
from smm_panel.services.audit import log_api_call
from smm_panel.services.orders import place_order, update_order_status

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)

MAX_PRICE = Decimal("9999999999.9999")


def _api_user(request: Request, db: Session = Depends(get_db)) -> User:
    try:
        return get_api_user(request, db)
    except HTTPException as exc:
        log_api_call(
            db,
            request,
            user_id=None,
            response_data={"error": exc.detail},
            status_code=exc.status_code,
        )
        raise


def _logged(
    db: Session,
    request: Request,
    user: User,
    request_data: Any,
    call: Callable[[], Any],
    status_code: int = 200,
) -> Any:
    try:
        result = call()
    except HTTPException as exc:
        db.rollback()
        log_api_call(
            db,
            request,
            user_id=user.id,
            request_data=jsonable_encoder(request_data),
            response_data={"error": jsonable_encoder(exc.detail)},
            status_code=exc.status_code,
        )
        raise
    except Exception:
        db.rollback()
        logger.exception("External API call failed: %s %s", request.method, request.url.path)
        log_api_call(
            db,
            request,
            user_id=user.id,
            request_data=jsonable_encoder(request_data),
            response_data={"error": "Internal server error"},
            status_code=500,
        )
        raise
    log_api_call(
        db,
        request,
        user_id=user.id,
        request_data=jsonable_encoder(request_data),
        response_data=jsonable_encoder(result),
        status_code=status_code,
    )
    return result


def _require_staff_key(user: User) -> None:
    if user.role not in (UserRole.SELLER, UserRole.ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient permissions")


@router.post("/order", response_model=ExternalOrderCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.order_rate_limit)
def create_order(
    request: Request,
    payload: ExternalOrderCreate,
    db: Session = Depends(get_db),
    user: User = Depends(_api_user),
):
    def _place():
        placed = place_order(
            db,
            user,
            service_id=payload.service_id,
            link=payload.link,
            quantity=payload.quantity,
        )
        return {"order_id": placed.order.id, "status": placed.order.status, "price": placed.order.price}

    return _logged(db, request, user, payload.model_dump(), _place, status_code=201)


@router.get("/order/{order_id}", response_model=ExternalOrderStatus)
def get_order_status(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(_api_user),
):
    def _read():
        query = db.query(Order).filter(Order.id == order_id)
        if user.role == UserRole.CLIENT:
            query = query.filter(Order.user_id == user.id)
        order = query.first()
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        return {
            "order_id": order.id,
            "status": order.status,
            "start_count": order.start_count or 0,
            "remains": order.remains or 0,
            "quantity": order.quantity,
            "price": order.price,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }

    return _logged(db, request, user, {"order_id": order_id}, _read)


@router.post("/order/{order_id}/status", response_model=ExternalOrderStatus)
def update_status(
    order_id: int,
    request: Request,
    payload: ExternalStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(_api_user),
):
    def _update():
        _require_staff_key(user)
        order = db.query(Order).filter(Order.id == order_id).with_for_update().first()
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        update_order_status(
            db,
            order,
            user,
            payload.status,
            start_count=payload.start_count,
            remains=payload.remains,
        )
        return {
            "order_id": order.id,
            "status": order.status,
            "start_count": order.start_count or 0,
            "remains": order.remains or 0,
            "quantity": order.quantity,
            "price": order.price,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }

    return _logged(db, request, user, payload.model_dump(), _update)


def _sync_entry(db: Session, entry: dict, default_category_id: int | None) -> str:
    """Upsert one catalog entry. Returns "created" or "updated"; raises ValueError on bad input."""
    api_id = str(entry.get("api_service_id") or "").strip()
    name = str(entry.get("name") or "").strip()
    if not api_id or not name or entry.get("price") in (None, ""):
        raise ValueError("api_service_id, name and price are required")
    try:
        price = Decimal(str(entry["price"]))
        reseller_price = Decimal(str(entry.get("reseller_price", price)))
    except (InvalidOperation, ValueError):
        raise ValueError("price must be a number")
    if not price.is_finite() or not reseller_price.is_finite():
        raise ValueError("price must be a number")
    if price < 0 or reseller_price < 0:
        raise ValueError("price must not be negative")
    if price > MAX_PRICE or reseller_price > MAX_PRICE:
        raise ValueError("price is too large")

    min_quantity = int(entry.get("min_quantity") or 100)
    max_quantity = int(entry.get("max_quantity") or 10000)
    if min_quantity < 1 or max_quantity < min_quantity:
        raise ValueError("invalid quantity bounds")

    service = db.query(Service).filter(Service.api_service_id == api_id).first()
    fields = {
        "name": name,
        "description": entry.get("description"),
        "price": price,
        "reseller_price": reseller_price,
        "min_quantity": min_quantity,
        "max_quantity": max_quantity,
        "speed": str(entry.get("speed") or "fast"),
    }
    if service:
        for key, value in fields.items():
            setattr(service, key, value)
        return "updated"

    category_id = entry.get("category_id") or default_category_id
    if not category_id or not db.query(Category).filter(Category.id == category_id).first():
        raise ValueError("category_id is missing or unknown")
    db.add(Service(category_id=category_id, api_service_id=api_id, status="active", **fields))
    return "created"


@router.post("/services/sync", response_model=ServicesSyncResponse)
def sync_services(
    request: Request,
    payload: ServicesSyncRequest,
    db: Session = Depends(get_db),
    user: User = Depends(_api_user),
):
    def _sync():
        _require_staff_key(user)
        first_category = db.query(Category).order_by(Category.id.asc()).first()
        default_category_id = first_category.id if first_category else None

        synced = updated = 0
        errors: list[str] = []
        seen: set[str] = set()
        for index, entry in enumerate(payload.services):
            label = entry.get("api_service_id") or f"#{index}"
            api_id = str(entry.get("api_service_id") or "").strip()
            if api_id and api_id in seen:
                errors.append(f"{label}: duplicate api_service_id in this batch")
                continue
            try:
                outcome = _sync_entry(db, entry, default_category_id)
            except (ValueError, TypeError) as exc:
                errors.append(f"{label}: {exc}")
                continue
            seen.add(api_id)
            if outcome == "created":
                synced += 1
            else:
                updated += 1
        db.commit()
        logger.info("Service sync by user=%s created=%s updated=%s errors=%s", user.id, synced, updated, len(errors))
        return {"synced": synced, "updated": updated, "errors": errors}

    return _logged(db, request, user, {"count": len(payload.services)}, _sync)
