"""
Security utilities for authentication and authorization
Handles password hashing, JWT session tokens and role checks
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from quizmentor.core.config import Settings, settings
from quizmentor.core.database import get_db
from quizmentor.core.exceptions import (
    AuthenticationException,
    AuthorizationException,
    NotFoundException,
)

# HTTP Bearer scheme; missing headers are reported by us as 401
security = HTTPBearer(auto_error=False)


class PasswordHasher:
    """One-way hashing of credentials at rest"""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """Verify a plain password against hashed password"""
        if not hashed_password:
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            # Malformed or unknown hash format
            return False


@dataclass
class TokenData:
    """Identity carried by a session token"""

    user_id: int
    role: str


class TokenIssuer:
    """Mints and validates signed bearer tokens"""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def create_access_token(
        self, user_id: int, role: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token

        Args:
            user_id: Identity to bind into the token
            role: Role of the user at issue time
            expires_delta: Token lifetime, defaults to the configured expiry

        Returns:
            Encoded JWT token
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.expire_minutes)
        expire = datetime.now(timezone.utc) + expires_delta
        to_encode: Dict[str, Any] = {"userId": user_id, "role": role, "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenData:
        """
        Decode JWT token

        Raises:
            AuthenticationException: If token is invalid, expired or lacks an identity
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            raise AuthenticationException("Could not validate credentials")

        user_id = payload.get("userId")
        role = payload.get("role")
        if user_id is None or role is None:
            raise AuthenticationException("Invalid authentication credentials")

        try:
            return TokenData(user_id=int(user_id), role=str(role))
        except (TypeError, ValueError):
            raise AuthenticationException("Invalid authentication credentials")


def build_password_hasher(config: Settings) -> PasswordHasher:
    return PasswordHasher(rounds=config.BCRYPT_ROUNDS)


def build_token_issuer(config: Settings) -> TokenIssuer:
    return TokenIssuer(
        secret_key=config.SECRET_KEY,
        algorithm=config.ALGORITHM,
        expire_minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


# Process-wide instances, built once from settings and handed out via dependencies
password_hasher = build_password_hasher(settings)
token_issuer = build_token_issuer(settings)


def get_password_hasher() -> PasswordHasher:
    return password_hasher


def get_token_issuer() -> TokenIssuer:
    return token_issuer


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenData:
    """
    Resolve the caller's identity from the bearer token

    Raises:
        AuthenticationException: If the header is missing or the token is invalid
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Not authenticated")
    return issuer.decode_token(credentials.credentials)


def require_role(*allowed_roles: str):
    """
    Dependency factory requiring the caller to hold one of ``allowed_roles``

    The role is checked against the stored user, so a demoted or deactivated
    account cannot keep acting on an older token.
    """

    def role_checker(
        identity: TokenData = Depends(get_current_identity), db: Session = Depends(get_db)
    ):
        from quizmentor.models import User

        user = db.query(User).filter(User.id == identity.user_id).first()
        if not user:
            raise NotFoundException("User")
        if not user.is_active:
            raise AuthorizationException("Account has been deactivated")
        if user.role.value not in allowed_roles:
            raise AuthorizationException("Insufficient permissions")
        return user

    return role_checker
