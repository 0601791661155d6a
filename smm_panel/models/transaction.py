import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Index
from sqlalchemy.orm import relationship
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class TransactionType(str, enum.Enum):
    DEPOSIT = "deposit"
    ORDER = "order"
    REFUND = "refund"
    ADMIN_ADD = "admin_add"
    ADMIN_REMOVE = "admin_remove"


class Transaction(Base, TimestampMixin):
    """Balance ledger row. amount is signed: debits are stored negative."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(Enum(TransactionType), nullable=False)
    amount = Column(Numeric(14, 4), nullable=False)
    balance_before = Column(Numeric(14, 4), nullable=False)
    balance_after = Column(Numeric(14, 4), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    description = Column(String(255), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    user = relationship("User", back_populates="transactions", foreign_keys=[user_id])


Index("ix_transactions_user_type", Transaction.user_id, Transaction.type)
Index("ix_transactions_order_id", Transaction.order_id)
