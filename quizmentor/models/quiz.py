"""
Quiz catalog model for QuizMentor
"""

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.sql import func

from quizmentor.core.database import Base
from quizmentor.models.user import Language


class Quiz(Base):
    """Quiz model"""
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    language = Column(Enum(Language), default=Language.ENGLISH, nullable=False)
    difficulty_level = Column(Integer, default=1, nullable=False)  # 1-5
    category = Column(String, nullable=True, index=True)

    time_limit = Column(Integer, default=30)  # in minutes
    passing_score = Column(Float, default=70.0)  # percentage
    tags = Column(JSON, default=list)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
