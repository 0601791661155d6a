import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from smm_panel.core.database import get_db
from smm_panel.dependencies import get_optional_user, require_staff
from smm_panel.models import Category, Order, Service, User
from smm_panel.schemas.catalog import ServiceAdminOut, ServiceIn, ServiceOut, ServicesResponse
from smm_panel.schemas.common import Message
from smm_panel.services.pricing import unit_price_for_role
from smm_panel.utils.pagination import check_paging, page_payload

router = APIRouter()
logger = logging.getLogger(__name__)


def _service_out(service: Service, category_name: Optional[str], user: Optional[User]) -> dict:
    return {
        "id": service.id,
        "category_id": service.category_id,
        "category_name": category_name,
        "name": service.name,
        "description": service.description,
        "price": unit_price_for_role(service, user.role if user else None),
        "min_quantity": service.min_quantity,
        "max_quantity": service.max_quantity,
        "speed": service.speed,
        "status": service.status,
        "api_service_id": service.api_service_id,
    }


def _admin_out(service: Service, category_name: Optional[str]) -> dict:
    data = _service_out(service, category_name, None)
    data["reseller_price"] = service.reseller_price
    return data


def _active_category(db: Session, category_id: int) -> Category:
    category = (
        db.query(Category)
        .filter(Category.id == category_id, Category.status == "active")
        .first()
    )
    if not category:
        raise HTTPException(status_code=404, detail="Category not found or inactive")
    return category


@router.get("/", response_model=ServicesResponse)
def list_services(
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 50,
):
    check_paging(page, page_size)
    query = (
        db.query(Service, Category.name.label("category_name"))
        .join(Category, Service.category_id == Category.id)
        .filter(Service.status == "active", Category.status == "active")
    )
    if category_id:
        query = query.filter(Service.category_id == category_id)
    if search:
        needle = f"%{search.strip()}%"
        query = query.filter(or_(Service.name.ilike(needle), Service.description.ilike(needle)))

    total = query.count()
    rows = (
        query.order_by(Category.name.asc(), Service.name.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    items = [_service_out(service, category_name, user) for service, category_name in rows]
    return page_payload(items, total, page, page_size)


@router.get("/{service_id}", response_model=ServiceOut)
def get_service(
    service_id: int,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    row = (
        db.query(Service, Category.name.label("category_name"))
        .join(Category, Service.category_id == Category.id)
        .filter(Service.id == service_id, Service.status == "active")
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Service not found")
    service, category_name = row
    return _service_out(service, category_name, user)


@router.post("/", response_model=ServiceAdminOut, status_code=status.HTTP_201_CREATED)
def create_service(payload: ServiceIn, staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    category = _active_category(db, payload.category_id)
    service = Service(**payload.model_dump())
    db.add(service)
    db.commit()
    db.refresh(service)
    logger.info("Service created id=%s by user=%s", service.id, staff.id)
    return _admin_out(service, category.name)


@router.put("/{service_id}", response_model=ServiceAdminOut)
def update_service(
    service_id: int,
    payload: ServiceIn,
    staff: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    category = _active_category(db, payload.category_id)

    for field, value in payload.model_dump().items():
        setattr(service, field, value)
    db.commit()
    db.refresh(service)
    return _admin_out(service, category.name)


@router.delete("/{service_id}", response_model=Message)
def delete_service(service_id: int, staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")

    has_orders = db.query(func.count(Order.id)).filter(Order.service_id == service.id).scalar() or 0
    if has_orders:
        # Orders keep pointing at the row; hide it instead.
        service.status = "inactive"
        db.commit()
        return Message(message="Service deactivated (has existing orders)")

    db.delete(service)
    db.commit()
    return Message(message="Service deleted successfully")
