import logging
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from smm_panel.models import Transaction, TransactionType, User

logger = logging.getLogger(__name__)

MONEY_PLACES = Decimal("0.0001")


def as_money(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value)).quantize(MONEY_PLACES)


def lock_user(db: Session, user_id: int) -> Optional[User]:
    # Row lock so two concurrent debits can't both read the same balance.
    return db.query(User).filter(User.id == user_id).with_for_update().first()


def _apply(
    db: Session,
    user: User,
    delta: Decimal,
    tx_type: TransactionType,
    description: str,
    order_id: Optional[int],
    created_by: Optional[int],
) -> Transaction:
    balance_before = as_money(user.balance)
    balance_after = balance_before + delta
    if balance_after < 0:
        raise HTTPException(status_code=400, detail="Insufficient balance")

    user.balance = balance_after
    entry = Transaction(
        user_id=user.id,
        type=tx_type,
        amount=delta,
        balance_before=balance_before,
        balance_after=balance_after,
        order_id=order_id,
        description=description,
        created_by=created_by,
    )
    db.add(entry)
    logger.info(
        "Ledger %s user=%s amount=%s balance %s->%s",
        tx_type.value,
        user.id,
        delta,
        balance_before,
        balance_after,
    )
    return entry


def credit_balance(
    db: Session,
    user: User,
    amount: Decimal,
    tx_type: TransactionType,
    description: str,
    *,
    order_id: Optional[int] = None,
    created_by: Optional[int] = None,
) -> Transaction:
    """Add funds and append the ledger row. The caller commits."""
    amount = as_money(amount)
    if amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than zero")
    return _apply(db, user, amount, tx_type, description, order_id, created_by)


def debit_balance(
    db: Session,
    user: User,
    amount: Decimal,
    tx_type: TransactionType,
    description: str,
    *,
    order_id: Optional[int] = None,
    created_by: Optional[int] = None,
) -> Transaction:
    """Remove funds and append a negative ledger row. The caller commits."""
    amount = as_money(amount)
    if amount < 0:
        raise HTTPException(status_code=400, detail="Amount must not be negative")
    return _apply(db, user, -amount, tx_type, description, order_id, created_by)
