from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AnyHttpUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

from smm_panel.models.order import OrderStatus


_http_url = TypeAdapter(AnyHttpUrl)


def validate_link(value: str) -> str:
    """Check that ``value`` is an absolute http(s) URL and return it as typed, trimmed."""
    value = (value or "").strip()
    if len(value) > 500:
        raise ValueError("Link is too long (max 500 characters)")
    if any(ch.isspace() for ch in value):
        raise ValueError("Link must be a valid http(s) URL")
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("Link must be a valid http(s) URL")
    return value


class OrderCreate(BaseModel):
    service_id: int = Field(..., ge=1)
    link: str
    quantity: int = Field(..., ge=1)
    coupon: Optional[str] = Field(default=None, max_length=50)

    @field_validator("link")
    @classmethod
    def check_link(cls, value: str) -> str:
        return validate_link(value)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    start_count: Optional[int] = Field(default=None, ge=0)
    remains: Optional[int] = Field(default=None, ge=0)


class OrderOut(BaseModel):
    id: int
    user_id: int
    service_id: int
    seller_id: Optional[int] = None
    service_name: Optional[str] = None
    category_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    link: str
    quantity: int
    price: Decimal
    status: OrderStatus
    start_count: int = 0
    remains: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class OrderCreated(BaseModel):
    order: OrderOut
    discount: Decimal = Decimal("0")
    balance: Decimal


class OrdersResponse(BaseModel):
    items: list[OrderOut]
    total: int
    page: int
    page_size: int
    pages: int
