from sqlalchemy import Column, Integer, String, Text, Index
from sqlalchemy.orm import relationship
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class Category(Base, TimestampMixin):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="active")  # active|inactive

    services = relationship("Service", back_populates="category")


Index("ix_categories_status_name", Category.status, Category.name)
