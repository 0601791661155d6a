from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from smm_panel.models import Coupon, CouponUsage, DiscountType
from smm_panel.services.ledger import MONEY_PLACES


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coupon_is_usable(coupon: Coupon, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    if (coupon.status or "").lower() != "active":
        return False
    valid_from = _as_utc(coupon.valid_from)
    valid_until = _as_utc(coupon.valid_until)
    if valid_from and valid_from > now:
        return False
    if valid_until and valid_until < now:
        return False
    if coupon.usage_limit and int(coupon.used_count or 0) >= int(coupon.usage_limit):
        return False
    return True


def compute_discount(coupon: Coupon, price: Decimal) -> Decimal:
    price = Decimal(str(price))
    value = Decimal(str(coupon.discount_value or 0))
    if coupon.discount_type == DiscountType.PERCENTAGE:
        discount = (price * value / Decimal("100")).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
        if coupon.max_discount is not None and discount > Decimal(str(coupon.max_discount)):
            discount = Decimal(str(coupon.max_discount))
    else:
        discount = value
    if discount < 0:
        return Decimal("0")
    return min(discount, price)


def find_usable_coupon(db: Session, code: Optional[str]) -> Optional[Coupon]:
    raw = (code or "").strip()
    if not raw:
        return None
    coupon = db.query(Coupon).filter(Coupon.code == raw).with_for_update().first()
    if not coupon or not coupon_is_usable(coupon):
        return None
    return coupon


def record_coupon_usage(db: Session, coupon: Coupon, *, user_id: int, order_id: int, discount: Decimal) -> CouponUsage:
    usage = CouponUsage(
        coupon_id=coupon.id,
        user_id=user_id,
        order_id=order_id,
        discount_amount=discount,
    )
    db.add(usage)
    coupon.used_count = int(coupon.used_count or 0) + 1
    return usage
