"""
User model for QuizMentor
"""

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from quizmentor.core.database import Base


class UserRole(enum.Enum):
    """User roles"""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class Language(enum.Enum):
    """Supported languages"""
    ENGLISH = "english"
    SINHALA = "sinhala"
    TAMIL = "tamil"


favorite_quizzes = Table(
    "favorite_quizzes",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("quiz_id", Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    profile_picture = Column(String, default="default-profile.png")

    preferred_language = Column(Enum(Language), default=Language.ENGLISH, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.STUDENT, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    last_login = Column(DateTime(timezone=True), nullable=True)
    login_count = Column(Integer, default=0, nullable=False)

    # Learning profile
    current_level = Column(Integer, default=1, nullable=False)  # 1-5
    total_quizzes_taken = Column(Integer, default=0, nullable=False)
    total_questions_answered = Column(Integer, default=0, nullable=False)
    correct_answer_rate = Column(Float, default=0.0, nullable=False)

    # Optimistic concurrency counter, bumped on every UPDATE of the row
    version_id = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    completed_quizzes = relationship(
        "CompletedQuiz",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="CompletedQuiz.id",
    )
    knowledge_gaps = relationship(
        "KnowledgeGap",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="KnowledgeGap.id",
    )
    favorited_quizzes = relationship("Quiz", secondary=favorite_quizzes, order_by="Quiz.id")

    __mapper_args__ = {"version_id_col": version_id}


class CompletedQuiz(Base):
    """Latest result of a user's attempts at one quiz"""
    __tablename__ = "completed_quizzes"
    __table_args__ = (UniqueConstraint("user_id", "quiz_id", name="uq_completed_quiz"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Null once the quiz has been removed from the catalog
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="SET NULL"), nullable=True)

    score = Column(Float, nullable=False)  # percentage
    completed_at = Column(DateTime(timezone=True), nullable=False)
    attempt_count = Column(Integer, default=1, nullable=False)

    user = relationship("User", back_populates="completed_quizzes")
    quiz = relationship("Quiz")


class KnowledgeGap(Base):
    """Assessed confidence for a topic the user answered incorrectly"""
    __tablename__ = "knowledge_gaps"
    __table_args__ = (UniqueConstraint("user_id", "topic", name="uq_knowledge_gap_topic"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    topic = Column(String, nullable=False)
    confidence_score = Column(Float, nullable=False)  # 0-100
    last_assessed = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="knowledge_gaps")
