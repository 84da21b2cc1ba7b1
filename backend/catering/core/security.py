from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from catering.config import get_settings
from catering.core.exceptions import AuthError
from catering.models.user import UserRole, STAFF_ROLES

settings = get_settings()


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a bearer token for a user (development and tests only)."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> int:
    """Return the user id carried by a token, or raise AuthError."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        raise AuthError("Invalid or expired token")

    subject = payload.get("sub")
    if subject is None:
        raise AuthError("Invalid or expired token")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise AuthError("Invalid or expired token")


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as resolved from the bearer token."""
    user_id: int
    role: UserRole

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
