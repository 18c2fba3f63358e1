"""
User endpoints
Account management and the learning record of the signed-in user
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from quizmentor.core.config import Settings, get_settings
from quizmentor.core.database import get_db
from quizmentor.core.security import TokenData, get_current_identity
from quizmentor.schemas.auth import AuthResponse, UserLogin, UserPublic, UserRegister
from quizmentor.schemas.common import MessageResponse
from quizmentor.schemas.learning import (
    FavoriteQuizView,
    FavoritesResponse,
    FavoriteToggle,
    FavoriteToggleResponse,
    LearningStatsResponse,
    QuizResultCreate,
    QuizResultResponse,
)
from quizmentor.schemas.user import (
    PasswordChange,
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    UserProfile,
)
from quizmentor.services.accounts import AccountService, get_account_service
from quizmentor.services.learning import LearningRecordService

router = APIRouter()


# Public routes

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_create: UserRegister,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    """Register a new student account"""
    user, token = accounts.register(db, user_create)
    return AuthResponse(
        message="User registered successfully",
        user=UserPublic.model_validate(user),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    """Login with email and password"""
    user, token = accounts.login(db, credentials)
    return AuthResponse(
        message="Login successful",
        user=UserPublic.model_validate(user),
        token=token,
    )


# Protected routes

@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Get current user profile"""
    user = AccountService.get_profile(db, identity.user_id)
    return ProfileResponse(user=UserProfile.model_validate(user))


@router.put("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    profile: ProfileUpdate,
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    """Update name, preferred language or profile picture"""
    user = accounts.update_profile(db, identity.user_id, profile)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserPublic.model_validate(user),
    )


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    passwords: PasswordChange,
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    """Change password after confirming the current one"""
    accounts.change_password(db, identity.user_id, passwords)
    return MessageResponse(message="Password changed successfully")


# Quiz interaction routes

@router.post("/quiz-result", response_model=QuizResultResponse)
def save_quiz_result(
    result: QuizResultCreate,
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    """Record a quiz result and update learning statistics"""
    user = LearningRecordService.record_quiz_result(
        db, identity.user_id, result, policy=config.QUIZ_TOTAL_POLICY
    )
    return QuizResultResponse(
        message="Quiz result saved successfully",
        current_level=user.current_level,
        total_quizzes_taken=user.total_quizzes_taken,
        correct_answer_rate=user.correct_answer_rate,
    )


@router.get("/learning-stats", response_model=LearningStatsResponse)
def get_learning_stats(
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Get aggregated learning statistics"""
    return LearningStatsResponse(stats=LearningRecordService.get_learning_stats(db, identity.user_id))


@router.post("/favorite-quiz", response_model=FavoriteToggleResponse)
def toggle_favorite_quiz(
    favorite: FavoriteToggle,
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Add a quiz to favorites, or remove it if already there"""
    is_favorited = LearningRecordService.toggle_favorite(db, identity.user_id, favorite.quiz_id)
    return FavoriteToggleResponse(
        message="Quiz added to favorites" if is_favorited else "Quiz removed from favorites",
        is_favorited=is_favorited,
    )


@router.get("/favorited-quizzes", response_model=FavoritesResponse)
def get_favorited_quizzes(
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Get favorited quizzes"""
    quizzes = LearningRecordService.get_favorites(db, identity.user_id)
    return FavoritesResponse(
        favorited_quizzes=[FavoriteQuizView.model_validate(quiz) for quiz in quizzes]
    )
