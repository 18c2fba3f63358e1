"""Admin schemas"""

from quizmentor.schemas.auth import UserPublic
from quizmentor.schemas.common import CamelModel


class UserStatusUpdate(CamelModel):
    is_active: bool


class UserStatusResponse(CamelModel):
    message: str
    user: UserPublic
