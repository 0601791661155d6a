from sqlalchemy import Column, Integer, String, ForeignKey, Index
from sqlalchemy.orm import relationship
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class LoginLog(Base, TimestampMixin):
    __tablename__ = "login_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    email = Column(String(255), nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    status = Column(String(16), nullable=False)  # success|failed

    user = relationship("User")


Index("ix_login_logs_status_created", LoginLog.status, LoginLog.created_at)
Index("ix_login_logs_user_id", LoginLog.user_id)
