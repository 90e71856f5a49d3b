from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    # Payments are attributed by display name, not by user_id
    display_name = Column(String(255), nullable=False)
    notify_new_payment = Column(Boolean, default=True)
    notify_goal_reached = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
