from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from smm_panel.models.order import OrderStatus
from smm_panel.schemas.order import validate_link


class ExternalOrderCreate(BaseModel):
    service_id: int = Field(..., ge=1)
    link: str
    quantity: int = Field(..., ge=1)

    @field_validator("link")
    @classmethod
    def check_link(cls, value: str) -> str:
        return validate_link(value)


class ExternalOrderCreated(BaseModel):
    order_id: int
    status: OrderStatus
    price: Decimal


class ExternalOrderStatus(BaseModel):
    order_id: int
    status: OrderStatus
    start_count: int
    remains: int
    quantity: int
    price: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExternalStatusUpdate(BaseModel):
    status: OrderStatus
    start_count: Optional[int] = Field(default=None, ge=0)
    remains: Optional[int] = Field(default=None, ge=0)


class ServicesSyncRequest(BaseModel):
    # Entries are validated one by one so a bad row doesn't reject the batch.
    services: list[dict[str, Any]]


class ServicesSyncResponse(BaseModel):
    synced: int
    updated: int
    errors: list[str]
