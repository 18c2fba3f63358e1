"""
Quiz catalog endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from quizmentor.core.database import get_db
from quizmentor.core.security import require_role
from quizmentor.models import Language, User
from quizmentor.schemas.quiz import QuizCreate, QuizResponse
from quizmentor.services.quizzes import QuizService

router = APIRouter()


@router.get("/", response_model=List[QuizResponse])
def get_quizzes(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    language: Optional[Language] = None,
    difficulty_level: Optional[int] = Query(None, alias="difficultyLevel", ge=1, le=5),
    db: Session = Depends(get_db),
):
    """Get quizzes with pagination and filters"""
    return QuizService.get_quizzes(
        db, language=language, difficulty_level=difficulty_level, skip=skip, limit=limit
    )


@router.get("/{quiz_id}", response_model=QuizResponse)
def get_quiz(quiz_id: int, db: Session = Depends(get_db)):
    """Get specific quiz by ID"""
    return QuizService.get_quiz(db, quiz_id)


@router.post("/", response_model=QuizResponse, status_code=status.HTTP_201_CREATED)
def create_quiz(
    quiz_create: QuizCreate,
    current_user: User = Depends(require_role("teacher", "admin")),
    db: Session = Depends(get_db),
):
    """Create new quiz (teachers and admins only)"""
    return QuizService.create_quiz(db, quiz_create, current_user)
