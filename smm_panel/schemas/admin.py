from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from smm_panel.models.coupon import DiscountType


class SettingsUpdate(BaseModel):
    settings: dict[str, Any]


class LoginLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    email: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class LoginLogsResponse(BaseModel):
    items: list[LoginLogOut]
    total: int
    page: int
    page_size: int
    pages: int


class ApiLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    endpoint: str
    method: str
    ip_address: Optional[str] = None
    request_data: Any = None
    response_data: Any = None
    status_code: int
    created_at: Optional[datetime] = None


class ApiLogsResponse(BaseModel):
    items: list[ApiLogOut]
    total: int
    page: int
    page_size: int
    pages: int


COUPON_STATUSES = Literal["active", "inactive"]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def check_coupon_terms(
    discount_type: DiscountType,
    discount_value: Decimal,
    valid_from: Optional[datetime],
    valid_until: Optional[datetime],
) -> None:
    if discount_type == DiscountType.PERCENTAGE and Decimal(str(discount_value)) > 100:
        raise ValueError("Percentage discount cannot exceed 100")
    start, end = _as_utc(valid_from), _as_utc(valid_until)
    if start and end and start > end:
        raise ValueError("valid_from must be before valid_until")


class CouponIn(BaseModel):
    code: str = Field(..., min_length=2, max_length=50)
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: Decimal = Field(..., gt=0, max_digits=14, decimal_places=4)
    max_discount: Optional[Decimal] = Field(default=None, ge=0, max_digits=14, decimal_places=4)
    usage_limit: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    status: COUPON_STATUSES = "active"

    @model_validator(mode="after")
    def _check(self):
        check_coupon_terms(self.discount_type, self.discount_value, self.valid_from, self.valid_until)
        return self


class CouponUpdate(BaseModel):
    discount_value: Optional[Decimal] = Field(default=None, gt=0, max_digits=14, decimal_places=4)
    max_discount: Optional[Decimal] = Field(default=None, ge=0, max_digits=14, decimal_places=4)
    usage_limit: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    status: Optional[COUPON_STATUSES] = None

    @model_validator(mode="after")
    def _no_null_required(self):
        for field in ("discount_value", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class CouponOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_discount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    used_count: int
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    status: str
    created_at: Optional[datetime] = None
