from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from smm_panel.core.database import get_db
from smm_panel.dependencies import require_staff
from smm_panel.models import Category, Service
from smm_panel.schemas.catalog import CategoryIn, CategoryOut, CategoryUpdate
from smm_panel.schemas.common import Message

router = APIRouter()


def _get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("/", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return db.query(Category).filter(Category.status == "active").order_by(Category.name.asc()).all()


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return _get_category(db, category_id)


@router.post("/", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryIn, staff=Depends(require_staff), db: Session = Depends(get_db)):
    category = Category(name=payload.name.strip(), description=payload.description, status=payload.status)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    staff=Depends(require_staff),
    db: Session = Depends(get_db),
):
    category = _get_category(db, category_id)
    if payload.name is not None:
        category.name = payload.name.strip()
    if payload.description is not None:
        category.description = payload.description
    if payload.status is not None:
        category.status = payload.status
    db.commit()
    db.refresh(category)
    return category


@router.delete("/{category_id}", response_model=Message)
def delete_category(category_id: int, staff=Depends(require_staff), db: Session = Depends(get_db)):
    category = _get_category(db, category_id)
    in_use = db.query(func.count(Service.id)).filter(Service.category_id == category.id).scalar() or 0
    if in_use:
        raise HTTPException(status_code=400, detail="Cannot delete category with existing services")
    db.delete(category)
    db.commit()
    return Message(message="Category deleted successfully")
