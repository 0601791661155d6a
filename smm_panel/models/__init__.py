from smm_panel.models.user import User, UserRole, UserStatus
from smm_panel.models.category import Category
from smm_panel.models.service import Service
from smm_panel.models.order import Order, OrderStatus
from smm_panel.models.transaction import Transaction, TransactionType
from smm_panel.models.ticket import Ticket, TicketMessage, TicketStatus, TicketPriority
from smm_panel.models.coupon import Coupon, CouponUsage, DiscountType
from smm_panel.models.setting import Setting
from smm_panel.models.login_log import LoginLog
from smm_panel.models.api_log import ApiLog
from smm_panel.models.affiliate import Affiliate, AffiliateReferral

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Category",
    "Service",
    "Order",
    "OrderStatus",
    "Transaction",
    "TransactionType",
    "Ticket",
    "TicketMessage",
    "TicketStatus",
    "TicketPriority",
    "Coupon",
    "CouponUsage",
    "DiscountType",
    "Setting",
    "LoginLog",
    "ApiLog",
    "Affiliate",
    "AffiliateReferral",
]
