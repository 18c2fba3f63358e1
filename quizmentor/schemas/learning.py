"""
Learning record schemas for QuizMentor
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from quizmentor.models.user import Language
from quizmentor.schemas.common import CamelModel
from quizmentor.schemas.user import KnowledgeGapView


class QuizResultCreate(CamelModel):
    """A scored submission against one quiz"""
    quiz_id: int
    score: float = Field(..., ge=0, le=100)
    correct_answers: int = Field(0, ge=0)
    incorrect_topics: List[str] = []

    @field_validator("incorrect_topics")
    @classmethod
    def clean_topics(cls, v: List[str]) -> List[str]:
        return [topic.strip() for topic in v if topic and topic.strip()]


class QuizResultResponse(CamelModel):
    message: str
    current_level: int
    total_quizzes_taken: int
    correct_answer_rate: float


class LevelPerformance(CamelModel):
    count: int = 0
    total_score: float = 0.0
    average_score: float = 0.0


class LearningStats(CamelModel):
    total_quizzes_taken: int
    total_questions_answered: int
    correct_answer_rate: float
    current_level: int
    overall_average_score: float
    performance_by_level: Dict[int, LevelPerformance]
    knowledge_gaps: List[KnowledgeGapView]


class LearningStatsResponse(CamelModel):
    stats: LearningStats


class FavoriteToggle(CamelModel):
    quiz_id: int


class FavoriteToggleResponse(CamelModel):
    message: str
    is_favorited: bool


class FavoriteQuizView(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    difficulty_level: int
    language: Language
    created_at: Optional[datetime] = None


class FavoritesResponse(CamelModel):
    favorited_quizzes: List[FavoriteQuizView]
