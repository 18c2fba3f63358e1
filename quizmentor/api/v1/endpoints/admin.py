"""
Admin endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quizmentor.core.database import get_db
from quizmentor.core.security import require_role
from quizmentor.models import User
from quizmentor.schemas.admin import UserStatusResponse, UserStatusUpdate
from quizmentor.schemas.auth import UserPublic
from quizmentor.services.accounts import AccountService, get_account_service

router = APIRouter()


@router.put("/users/{user_id}/status", response_model=UserStatusResponse)
def update_user_status(
    user_id: int,
    status_update: UserStatusUpdate,
    admin: User = Depends(require_role("admin")),
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    """Activate or deactivate a user account"""
    user = accounts.set_active(db, user_id, status_update.is_active)
    return UserStatusResponse(
        message="User activated" if user.is_active else "User deactivated",
        user=UserPublic.model_validate(user),
    )
