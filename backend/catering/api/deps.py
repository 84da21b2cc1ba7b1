from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from catering.core.database import get_db
from catering.core.documents import get_stats_collection
from catering.core.exceptions import AuthError, PermissionDeniedError
from catering.core.security import Principal, decode_access_token
from catering.models.user import User
from catering.services.notifications import LoggingNotifier, Notifier
from catering.services.stats import MenuStatsAggregator

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    """Resolve the bearer token to a principal. The user must still exist."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Missing authentication token")

    user_id = decode_access_token(credentials.credentials)
    user = db.get(User, user_id)
    if not user:
        raise AuthError("Unknown user")
    return Principal(user_id=user.id, role=user.role)


async def require_staff(principal: Principal = Depends(get_current_user)) -> Principal:
    """Employees and admins."""
    if not principal.is_staff:
        raise PermissionDeniedError("Access restricted to employees and administrators")
    return principal


async def require_admin(principal: Principal = Depends(get_current_user)) -> Principal:
    if not principal.is_admin:
        raise PermissionDeniedError("Access restricted to administrators")
    return principal


def get_stats_aggregator() -> MenuStatsAggregator:
    return MenuStatsAggregator(get_stats_collection())


def get_notifier() -> Notifier:
    return LoggingNotifier()
