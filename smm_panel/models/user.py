import enum
from sqlalchemy import Column, Integer, String, Enum, Index, DateTime, Numeric
from sqlalchemy.orm import relationship
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class UserRole(str, enum.Enum):
    CLIENT = "client"
    SELLER = "seller"
    ADMIN = "admin"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.CLIENT)
    status = Column(Enum(UserStatus), nullable=False, default=UserStatus.ACTIVE)
    balance = Column(Numeric(14, 4), nullable=False, default=0)
    api_key = Column(String(64), unique=True, nullable=True, index=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    reset_token = Column(String(128), nullable=True, index=True)
    reset_token_expires_at = Column(DateTime(timezone=True), nullable=True)

    orders = relationship("Order", back_populates="user", foreign_keys="Order.user_id")
    transactions = relationship("Transaction", back_populates="user", foreign_keys="Transaction.user_id")
    tickets = relationship("Ticket", back_populates="user")


Index("ix_users_role_status", User.role, User.status)
