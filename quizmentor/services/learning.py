"""
Learning record service for QuizMentor

Maintains a user's quiz completion history, knowledge gaps and the rolling
statistics derived from submitted quiz results.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from quizmentor.core.database import commit_or_conflict
from quizmentor.core.exceptions import NotFoundException
from quizmentor.models import CompletedQuiz, KnowledgeGap, Quiz, User
from quizmentor.schemas.learning import LearningStats, LevelPerformance, QuizResultCreate
from quizmentor.schemas.user import KnowledgeGapView

logger = logging.getLogger(__name__)

# Confidence recorded for a topic missed in an attempt is the attempt score minus this
KNOWLEDGE_GAP_PENALTY = 20
DEFAULT_DIFFICULTY_LEVEL = 1

PER_SUBMISSION = "per_submission"
PER_QUIZ = "per_quiz"


def gap_confidence(score: float) -> float:
    """Confidence recorded for topics missed in an attempt with ``score``"""
    return max(0.0, score - KNOWLEDGE_GAP_PENALTY)


def running_mean(old_mean: float, old_count: int, value: float) -> float:
    """Mean after adding ``value`` to ``old_count`` values averaging ``old_mean``"""
    return (old_mean * old_count + value) / (old_count + 1)


def replaced_mean(old_mean: float, count: int, old_value: float, new_value: float) -> float:
    """Mean after one of ``count`` values changes from ``old_value`` to ``new_value``"""
    if count <= 0:
        return new_value
    return (old_mean * count - old_value + new_value) / count


def overall_average_score(completed: Iterable[CompletedQuiz]) -> float:
    scores = [entry.score for entry in completed]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def performance_by_level(completed: Iterable[CompletedQuiz]) -> Dict[int, LevelPerformance]:
    """Group completed quizzes by the quiz's difficulty level"""
    levels: Dict[int, LevelPerformance] = {}
    for entry in completed:
        level = DEFAULT_DIFFICULTY_LEVEL
        if entry.quiz is not None and entry.quiz.difficulty_level:
            level = entry.quiz.difficulty_level

        bucket = levels.setdefault(level, LevelPerformance())
        bucket.count += 1
        bucket.total_score += entry.score

    for bucket in levels.values():
        bucket.average_score = bucket.total_score / bucket.count
    return dict(sorted(levels.items()))


def upsert_knowledge_gap(user: User, topic: str, confidence: float, now: datetime) -> None:
    for gap in user.knowledge_gaps:
        if gap.topic == topic:
            gap.confidence_score = confidence
            gap.last_assessed = now
            return
    user.knowledge_gaps.append(
        KnowledgeGap(topic=topic, confidence_score=confidence, last_assessed=now)
    )


def apply_quiz_result(
    user: User,
    result: QuizResultCreate,
    now: Optional[datetime] = None,
    policy: str = PER_SUBMISSION,
) -> CompletedQuiz:
    """
    Fold one quiz submission into the user's learning record in memory.

    With the ``per_submission`` policy every submission is counted: a retake
    increments totalQuizzesTaken again and adds another term to
    correctAnswerRate, so the rate is the mean of all scores ever submitted.
    With ``per_quiz`` a retake replaces the quiz's previous score, keeping the
    rate equal to the mean of the completed quizzes' current scores.
    """
    if policy not in (PER_SUBMISSION, PER_QUIZ):
        raise ValueError(f"Unknown quiz total policy: {policy}")

    now = now or datetime.now(timezone.utc)
    score = float(result.score)

    entry = next((c for c in user.completed_quizzes if c.quiz_id == result.quiz_id), None)
    previous_score = entry.score if entry is not None else None

    if entry is not None:
        entry.score = score
        entry.completed_at = now
        entry.attempt_count += 1
    else:
        entry = CompletedQuiz(
            quiz_id=result.quiz_id, score=score, completed_at=now, attempt_count=1
        )
        user.completed_quizzes.append(entry)

    taken = user.total_quizzes_taken or 0
    rate = user.correct_answer_rate or 0.0

    if policy == PER_QUIZ and previous_score is not None:
        user.correct_answer_rate = replaced_mean(rate, taken, previous_score, score)
    else:
        user.correct_answer_rate = running_mean(rate, taken, score)
        user.total_quizzes_taken = taken + 1

    user.total_questions_answered = (
        (user.total_questions_answered or 0) + result.correct_answers + len(result.incorrect_topics)
    )

    confidence = gap_confidence(score)
    for topic in result.incorrect_topics:
        upsert_knowledge_gap(user, topic, confidence, now)

    return entry


class LearningRecordService:
    """Quiz results, learning statistics and favorites for a user"""

    @staticmethod
    def _load_user(db: Session, user_id: int, *loads) -> User:
        query = db.query(User)
        if loads:
            query = query.options(*loads)
        user = query.filter(User.id == user_id).first()
        if not user:
            raise NotFoundException("User")
        return user

    @staticmethod
    def _load_quiz(db: Session, quiz_id: int) -> Quiz:
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise NotFoundException("Quiz")
        return quiz

    @staticmethod
    def record_quiz_result(
        db: Session, user_id: int, result: QuizResultCreate, policy: str = PER_SUBMISSION
    ) -> User:
        """
        Record a quiz submission and persist the updated statistics.

        The commit is guarded by the user's version counter; if another
        request updated the same user in between, ConcurrentUpdateException
        is raised and nothing is written.
        """
        user = LearningRecordService._load_user(
            db,
            user_id,
            selectinload(User.completed_quizzes),
            selectinload(User.knowledge_gaps),
        )
        LearningRecordService._load_quiz(db, result.quiz_id)

        entry = apply_quiz_result(user, result, policy=policy)
        commit_or_conflict(db)

        logger.info(
            "Quiz result recorded",
            extra={
                "user_id": user.id,
                "quiz_id": result.quiz_id,
                "score": result.score,
                "attempt_count": entry.attempt_count,
                "total_quizzes_taken": user.total_quizzes_taken,
            },
        )
        return user

    @staticmethod
    def get_learning_stats(db: Session, user_id: int) -> LearningStats:
        user = LearningRecordService._load_user(
            db,
            user_id,
            selectinload(User.completed_quizzes).selectinload(CompletedQuiz.quiz),
            selectinload(User.knowledge_gaps),
        )
        completed = list(user.completed_quizzes)

        return LearningStats(
            total_quizzes_taken=user.total_quizzes_taken,
            total_questions_answered=user.total_questions_answered,
            correct_answer_rate=user.correct_answer_rate,
            current_level=user.current_level,
            overall_average_score=overall_average_score(completed),
            performance_by_level=performance_by_level(completed),
            knowledge_gaps=[KnowledgeGapView.model_validate(gap) for gap in user.knowledge_gaps],
        )

    @staticmethod
    def toggle_favorite(db: Session, user_id: int, quiz_id: int) -> bool:
        """Flip membership of ``quiz_id`` in the user's favorites; returns the new state"""
        user = LearningRecordService._load_user(db, user_id, selectinload(User.favorited_quizzes))

        current = next((q for q in user.favorited_quizzes if q.id == quiz_id), None)
        if current is not None:
            user.favorited_quizzes.remove(current)
            is_favorited = False
        else:
            user.favorited_quizzes.append(LearningRecordService._load_quiz(db, quiz_id))
            is_favorited = True

        commit_or_conflict(db)
        logger.info(
            "Favorite toggled",
            extra={"user_id": user.id, "quiz_id": quiz_id, "is_favorited": is_favorited},
        )
        return is_favorited

    @staticmethod
    def get_favorites(db: Session, user_id: int) -> List[Quiz]:
        user = LearningRecordService._load_user(db, user_id, selectinload(User.favorited_quizzes))
        return list(user.favorited_quizzes)
