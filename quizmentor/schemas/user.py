"""
User profile schemas for QuizMentor
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from quizmentor.core.config import settings
from quizmentor.models.user import Language
from quizmentor.schemas.auth import UserPublic
from quizmentor.schemas.common import CamelModel


class ProfileUpdate(CamelModel):
    """Partial profile update; empty values mean "leave unchanged" """
    name: Optional[str] = None
    preferred_language: Optional[Language] = None
    profile_picture: Optional[str] = None

    @field_validator("name", "preferred_language", "profile_picture", mode="before")
    @classmethod
    def empty_is_missing(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None


class PasswordChange(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)


class QuizSummary(CamelModel):
    id: int
    title: str
    description: Optional[str] = None


class CompletedQuizView(CamelModel):
    quiz: Optional[QuizSummary] = None
    score: float
    completed_at: datetime
    attempt_count: int


class KnowledgeGapView(CamelModel):
    topic: str
    confidence_score: float
    last_assessed: datetime


class UserProfile(UserPublic):
    """Full profile of the signed-in user"""
    is_verified: bool
    last_login: Optional[datetime] = None
    login_count: int
    total_quizzes_taken: int
    total_questions_answered: int
    correct_answer_rate: float
    completed_quizzes: List[CompletedQuizView] = []
    knowledge_gaps: List[KnowledgeGapView] = []
    favorited_quizzes: List[int] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("favorited_quizzes", mode="before")
    @classmethod
    def quiz_ids(cls, v):
        return [getattr(quiz, "id", quiz) for quiz in v or []]


class ProfileResponse(CamelModel):
    user: UserProfile


class ProfileUpdateResponse(CamelModel):
    message: str
    user: UserPublic
