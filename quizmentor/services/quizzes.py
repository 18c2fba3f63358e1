"""Quiz catalog service"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from quizmentor.core.database import commit
from quizmentor.core.exceptions import NotFoundException
from quizmentor.models import Language, Quiz, User
from quizmentor.schemas.quiz import QuizCreate

logger = logging.getLogger(__name__)


class QuizService:
    @staticmethod
    def get_quizzes(
        db: Session,
        language: Optional[Language] = None,
        difficulty_level: Optional[int] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> List[Quiz]:
        """Get quizzes with optional filters"""
        query = db.query(Quiz)
        if language:
            query = query.filter(Quiz.language == language)
        if difficulty_level:
            query = query.filter(Quiz.difficulty_level == difficulty_level)
        return query.order_by(Quiz.id).offset(skip).limit(limit).all()

    @staticmethod
    def get_quiz(db: Session, quiz_id: int) -> Quiz:
        """Get quiz by ID"""
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise NotFoundException("Quiz")
        return quiz

    @staticmethod
    def create_quiz(db: Session, quiz_data: QuizCreate, current_user: User) -> Quiz:
        """Create quiz"""
        quiz = Quiz(**quiz_data.model_dump(), created_by=current_user.id)
        db.add(quiz)
        commit(db)
        db.refresh(quiz)
        logger.info("Quiz created", extra={"quiz_id": quiz.id, "created_by": current_user.id})
        return quiz
