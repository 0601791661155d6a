from sqlalchemy import Column, Integer, String, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class ApiLog(Base, TimestampMixin):
    __tablename__ = "api_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    endpoint = Column(String(255), nullable=False)
    method = Column(String(8), nullable=False)
    ip_address = Column(String(64), nullable=True)
    request_data = Column(JSON, nullable=True)
    response_data = Column(JSON, nullable=True)
    status_code = Column(Integer, nullable=False)

    user = relationship("User")


Index("ix_api_logs_user_created", ApiLog.user_id, ApiLog.created_at)
