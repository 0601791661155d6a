from sqlalchemy import Column, Integer, String, Text, ForeignKey, Numeric, Index
from sqlalchemy.orm import relationship
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class Service(Base, TimestampMixin):
    """
    A sellable catalog entry. Prices are per unit (one follower, one like, ...).

    status and speed are plain strings so new values don't need enum migrations.
    """

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(14, 4), nullable=False)
    reseller_price = Column(Numeric(14, 4), nullable=False)
    min_quantity = Column(Integer, nullable=False, default=100)
    max_quantity = Column(Integer, nullable=False, default=10000)
    speed = Column(String(32), nullable=False, default="fast")
    status = Column(String(16), nullable=False, default="active")  # active|inactive
    api_service_id = Column(String(64), nullable=True, unique=True)

    category = relationship("Category", back_populates="services")
    orders = relationship("Order", back_populates="service")


Index("ix_services_category_status", Service.category_id, Service.status)
