import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from smm_panel.core.config import get_settings
from smm_panel.core.database import get_db
from smm_panel.dependencies import get_current_user, require_admin, require_client
from smm_panel.models import Transaction, TransactionType, User
from smm_panel.schemas.transaction import (
    AdminAdjustRequest,
    BalanceChangeResponse,
    DepositRequest,
    TransactionsResponse,
)
from smm_panel.services.ledger import as_money, credit_balance, debit_balance, lock_user
from smm_panel.services.settings_store import get_decimal_setting
from smm_panel.utils.pagination import check_paging, page_payload

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)


def _coerce_type(value: Optional[str]) -> Optional[TransactionType]:
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    for member in TransactionType:
        if raw.lower() == member.value or raw.upper() == member.name:
            return member
    raise HTTPException(status_code=400, detail="Invalid type")


@router.get("/", response_model=TransactionsResponse)
def list_transactions(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    type: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
):
    check_paging(page, page_size)
    type_enum = _coerce_type(type)

    query = db.query(Transaction).filter(Transaction.user_id == user.id)
    if type_enum is not None:
        query = query.filter(Transaction.type == type_enum)

    total = query.count()
    items = (
        query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return page_payload(items, total, page, page_size)


@router.post("/deposit", response_model=BalanceChangeResponse)
def deposit(
    payload: DepositRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_client),
):
    amount = as_money(payload.amount)
    min_deposit = get_decimal_setting(db, "min_deposit", Decimal(settings.min_deposit_default))
    max_deposit = get_decimal_setting(db, "max_deposit", Decimal(settings.max_deposit_default))
    if amount < min_deposit or amount > max_deposit:
        raise HTTPException(
            status_code=400,
            detail=f"Deposit amount must be between {min_deposit} and {max_deposit}",
        )

    account = lock_user(db, user.id)
    if not account:
        raise HTTPException(status_code=404, detail="User not found")
    try:
        entry = credit_balance(
            db,
            account,
            amount,
            TransactionType.DEPOSIT,
            f"Deposit via {payload.method.strip()}",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(entry)
    return {"transaction": entry, "balance": as_money(account.balance)}


@router.post("/admin/adjust", response_model=BalanceChangeResponse)
def admin_adjust(
    payload: AdminAdjustRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    account = lock_user(db, payload.user_id)
    if not account:
        raise HTTPException(status_code=404, detail="User not found")

    tx_type = TransactionType(payload.type)
    description = (payload.description or "").strip() or (
        "Balance added by admin" if tx_type == TransactionType.ADMIN_ADD else "Balance removed by admin"
    )
    try:
        if tx_type == TransactionType.ADMIN_ADD:
            entry = credit_balance(db, account, payload.amount, tx_type, description, created_by=admin.id)
        else:
            entry = debit_balance(db, account, payload.amount, tx_type, description, created_by=admin.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(entry)
    logger.info("Admin %s adjusted user=%s type=%s amount=%s", admin.id, account.id, tx_type.value, payload.amount)
    return {"transaction": entry, "balance": as_money(account.balance)}
