from decimal import Decimal, ROUND_HALF_UP

from smm_panel.models import Service, UserRole
from smm_panel.services.ledger import MONEY_PLACES


def unit_price_for_role(service: Service, role: UserRole | None) -> Decimal:
    # Sellers buy at the reseller price; clients, admins and anonymous visitors see the list price.
    if role == UserRole.SELLER and service.reseller_price is not None:
        return Decimal(str(service.reseller_price))
    return Decimal(str(service.price))


def calculate_order_price(unit_price, quantity: int) -> Decimal:
    total = Decimal(str(unit_price)) * Decimal(int(quantity))
    return total.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
