# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.models.database import Base

HABIT_FREQUENCIES = ("daily", "weekly", "monthly")


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    frequency = Column(String, nullable=False, default="daily")  # 'daily', 'weekly', 'monthly'
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="habits")
    logs = relationship(
        "CompletionLog",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="CompletionLog.date.desc()",
    )

    def __repr__(self):
        return f"<Habit id={self.id} title={self.title!r} active={self.is_active}>"
