import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Index, DateTime
from sqlalchemy.orm import relationship
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PARTIAL = "partial"
    CANCELED = "canceled"
    REFUNDED = "refunded"


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    link = Column(String(500), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(14, 4), nullable=False)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    start_count = Column(Integer, nullable=False, default=0)
    remains = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="orders", foreign_keys=[user_id])
    seller = relationship("User", foreign_keys=[seller_id])
    service = relationship("Service", back_populates="orders")


Index("ix_orders_user_status", Order.user_id, Order.status)
Index("ix_orders_seller_status", Order.seller_id, Order.status)
