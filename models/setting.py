from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from database import Base


class AppSetting(Base):
    """Process-wide key/value settings (e.g. the shared daily goal)"""

    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(String(255), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
