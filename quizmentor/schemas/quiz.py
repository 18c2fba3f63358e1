"""
Quiz catalog schemas for QuizMentor
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from quizmentor.models.user import Language
from quizmentor.schemas.common import CamelModel


class QuizBase(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    language: Language = Language.ENGLISH
    difficulty_level: int = Field(1, ge=1, le=5)
    category: Optional[str] = None
    time_limit: int = Field(30, ge=1)
    passing_score: float = Field(70.0, ge=0, le=100)
    tags: List[str] = []


class QuizCreate(QuizBase):
    pass


class QuizResponse(QuizBase):
    id: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
