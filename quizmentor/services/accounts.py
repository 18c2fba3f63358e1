"""
Account service for QuizMentor
Registration, login, profile and credential management
"""

import logging
from datetime import datetime, timezone
from typing import Tuple

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from quizmentor.core.database import commit, commit_or_conflict
from quizmentor.core.exceptions import (
    AuthenticationException,
    AuthorizationException,
    DuplicateException,
    NotFoundException,
)
from quizmentor.core.logging import get_security_logger
from quizmentor.core.security import (
    PasswordHasher,
    TokenIssuer,
    get_password_hasher,
    get_token_issuer,
)
from quizmentor.models import CompletedQuiz, Language, User, UserRole
from quizmentor.schemas.auth import UserLogin, UserRegister
from quizmentor.schemas.user import PasswordChange, ProfileUpdate

logger = logging.getLogger(__name__)
security_logger = get_security_logger()

INVALID_CREDENTIALS = "Invalid credentials"


class AccountService:
    """Account operations over the user store"""

    def __init__(self, hasher: PasswordHasher, issuer: TokenIssuer):
        self.hasher = hasher
        self.issuer = issuer

    def set_password(self, user: User, password: str) -> None:
        """Replace the stored credential; the plaintext never reaches the row"""
        user.hashed_password = self.hasher.hash(password)

    def issue_token(self, user: User) -> str:
        return self.issuer.create_access_token(user_id=user.id, role=user.role.value)

    def register(self, db: Session, data: UserRegister) -> Tuple[User, str]:
        """Create a student account and return it with a fresh session token"""
        existing_user = db.query(User).filter(User.email == data.email).first()
        if existing_user:
            raise DuplicateException("User already exists with this email")

        user = User(
            name=data.name,
            email=data.email,
            preferred_language=data.preferred_language or Language.ENGLISH,
            role=UserRole.STUDENT,
            is_active=True,
        )
        self.set_password(user, data.password)

        db.add(user)
        try:
            commit(db)
        except IntegrityError:
            # Lost a race against a concurrent registration for the same email
            db.rollback()
            raise DuplicateException("User already exists with this email")
        db.refresh(user)

        security_logger.info("User registered", extra={"user_id": user.id})
        return user, self.issue_token(user)

    def login(self, db: Session, data: UserLogin) -> Tuple[User, str]:
        """
        Authenticate by email and password.

        Unknown email and wrong password produce the same error. A deactivated
        account is refused before any login bookkeeping is written.
        """
        user = db.query(User).filter(User.email == data.email).first()
        if not user:
            security_logger.info("Login failed: unknown email")
            raise AuthenticationException(INVALID_CREDENTIALS)

        if not user.is_active:
            security_logger.info("Login refused: account deactivated", extra={"user_id": user.id})
            raise AuthorizationException("Account has been deactivated")

        if not self.hasher.verify(data.password, user.hashed_password):
            security_logger.info("Login failed: wrong password", extra={"user_id": user.id})
            raise AuthenticationException(INVALID_CREDENTIALS)

        user.last_login = datetime.now(timezone.utc)
        user.login_count = (user.login_count or 0) + 1
        commit_or_conflict(db)

        security_logger.info("User logged in", extra={"user_id": user.id})
        return user, self.issue_token(user)

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        """Load a user or raise NotFoundException"""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundException("User")
        return user

    @staticmethod
    def get_profile(db: Session, user_id: int) -> User:
        """Load a user with completed quizzes, gaps and favorites resolved"""
        user = (
            db.query(User)
            .options(
                selectinload(User.completed_quizzes).selectinload(CompletedQuiz.quiz),
                selectinload(User.knowledge_gaps),
                selectinload(User.favorited_quizzes),
            )
            .filter(User.id == user_id)
            .first()
        )
        if not user:
            raise NotFoundException("User")
        return user

    def update_profile(self, db: Session, user_id: int, data: ProfileUpdate) -> User:
        """Overwrite only the fields that were provided with a non-empty value"""
        user = self.get_user(db, user_id)

        if data.name:
            user.name = data.name
        if data.preferred_language:
            user.preferred_language = data.preferred_language
        if data.profile_picture:
            user.profile_picture = data.profile_picture

        commit_or_conflict(db)
        logger.info("Profile updated", extra={"user_id": user.id})
        return user

    def change_password(self, db: Session, user_id: int, data: PasswordChange) -> None:
        user = self.get_user(db, user_id)

        if not self.hasher.verify(data.current_password, user.hashed_password):
            security_logger.info("Password change refused", extra={"user_id": user.id})
            raise AuthenticationException("Current password is incorrect")

        self.set_password(user, data.new_password)
        commit_or_conflict(db)
        security_logger.info("Password changed", extra={"user_id": user.id})

    def set_active(self, db: Session, user_id: int, is_active: bool) -> User:
        """Soft (de)activation; accounts are never hard-deleted"""
        user = self.get_user(db, user_id)
        user.is_active = is_active
        commit_or_conflict(db)
        security_logger.info(
            "Account status changed", extra={"user_id": user.id, "is_active": is_active}
        )
        return user


def get_account_service(
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AccountService:
    """Dependency wiring the service to the process-wide hasher and issuer"""
    return AccountService(hasher=hasher, issuer=issuer)
