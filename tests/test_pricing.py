from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from smm_panel.models import DiscountType, OrderStatus, UserRole
from smm_panel.services.coupons import compute_discount, coupon_is_usable
from smm_panel.services.orders import can_transition
from smm_panel.services.pricing import calculate_order_price, unit_price_for_role


def _coupon(**overrides):
    values = {
        "status": "active",
        "discount_type": DiscountType.PERCENTAGE,
        "discount_value": Decimal("10"),
        "max_discount": None,
        "usage_limit": None,
        "used_count": 0,
        "valid_from": None,
        "valid_until": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_calculate_order_price_rounds_half_up():
    assert calculate_order_price(Decimal("0.00125"), 3) == Decimal("0.0038")
    assert calculate_order_price("0.01", 1000) == Decimal("10.0000")


def test_unit_price_for_role():
    service = SimpleNamespace(price=Decimal("0.0100"), reseller_price=Decimal("0.0080"))

    assert unit_price_for_role(service, UserRole.SELLER) == Decimal("0.0080")
    assert unit_price_for_role(service, UserRole.CLIENT) == Decimal("0.0100")
    assert unit_price_for_role(service, UserRole.ADMIN) == Decimal("0.0100")
    assert unit_price_for_role(service, None) == Decimal("0.0100")


def test_percentage_discount_is_capped():
    coupon = _coupon(discount_value=Decimal("50"), max_discount=Decimal("2"))

    assert compute_discount(coupon, Decimal("10")) == Decimal("2")


def test_fixed_discount_never_exceeds_price():
    coupon = _coupon(discount_type=DiscountType.FIXED, discount_value=Decimal("25"))

    assert compute_discount(coupon, Decimal("10")) == Decimal("10")


def test_coupon_window_and_usage_limit():
    now = datetime.now(timezone.utc)

    assert coupon_is_usable(_coupon(), now)
    assert not coupon_is_usable(_coupon(status="inactive"), now)
    assert not coupon_is_usable(_coupon(valid_from=now + timedelta(hours=1)), now)
    assert not coupon_is_usable(_coupon(valid_until=now - timedelta(hours=1)), now)
    assert not coupon_is_usable(_coupon(usage_limit=3, used_count=3), now)
    assert coupon_is_usable(_coupon(valid_until=(now + timedelta(hours=1)).replace(tzinfo=None)), now)


def test_order_state_machine():
    assert can_transition(OrderStatus.PENDING, OrderStatus.PROCESSING)
    assert can_transition(OrderStatus.PROCESSING, OrderStatus.PARTIAL)
    assert can_transition(OrderStatus.COMPLETED, OrderStatus.REFUNDED)
    assert can_transition(OrderStatus.CANCELED, OrderStatus.CANCELED)
    assert not can_transition(OrderStatus.COMPLETED, OrderStatus.CANCELED)
    assert not can_transition(OrderStatus.IN_PROGRESS, OrderStatus.PROCESSING)
    assert not can_transition(OrderStatus.REFUNDED, OrderStatus.PENDING)
    assert not can_transition(OrderStatus.PENDING, OrderStatus.REFUNDED)
