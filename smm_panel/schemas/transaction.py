from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from smm_panel.models.transaction import TransactionType


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: TransactionType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    order_id: Optional[int] = None
    description: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


class TransactionsResponse(BaseModel):
    items: list[TransactionOut]
    total: int
    page: int
    page_size: int
    pages: int


class DepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=4)
    method: str = Field(default="manual", min_length=1, max_length=50)


class AdminAdjustRequest(BaseModel):
    user_id: int = Field(..., ge=1)
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=4)
    type: Literal["admin_add", "admin_remove"]
    description: Optional[str] = Field(default=None, max_length=255)


class BalanceChangeResponse(BaseModel):
    transaction: TransactionOut
    balance: Decimal
