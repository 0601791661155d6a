from sqlalchemy import Column, Integer, String, Text
from smm_panel.core.database import Base
from smm_panel.models.base import TimestampMixin


class Setting(Base, TimestampMixin):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    setting_key = Column(String(100), unique=True, nullable=False, index=True)
    setting_value = Column(Text, nullable=True)
    setting_type = Column(String(16), nullable=False, default="string")  # string|number|boolean
