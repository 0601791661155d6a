from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    status: Literal["active", "inactive"] = "active"


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class ServiceIn(BaseModel):
    category_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=14, decimal_places=4)
    reseller_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=14, decimal_places=4)
    min_quantity: int = Field(default=100, ge=1)
    max_quantity: int = Field(default=10000, ge=1)
    speed: str = Field(default="fast", max_length=32)
    status: Literal["active", "inactive"] = "active"
    api_service_id: Optional[str] = Field(default=None, max_length=64)

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min_quantity > self.max_quantity:
            raise ValueError("min_quantity cannot be greater than max_quantity")
        if self.reseller_price is None:
            self.reseller_price = self.price
        return self


class ServiceOut(BaseModel):
    id: int
    category_id: int
    category_name: Optional[str] = None
    name: str
    description: Optional[str] = None
    price: Decimal
    min_quantity: int
    max_quantity: int
    speed: str
    status: str
    api_service_id: Optional[str] = None


class ServiceAdminOut(ServiceOut):
    """Returned to staff after writes; carries both price columns."""

    reseller_price: Decimal


class ServicesResponse(BaseModel):
    items: list[ServiceOut]
    total: int
    page: int
    page_size: int
    pages: int
