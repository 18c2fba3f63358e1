"""
QuizMentor Models Package
"""

from quizmentor.models.user import CompletedQuiz, KnowledgeGap, Language, User, UserRole, favorite_quizzes
from quizmentor.models.quiz import Quiz

__all__ = [
    "User", "UserRole", "Language",
    "CompletedQuiz", "KnowledgeGap", "favorite_quizzes",
    "Quiz",
]
