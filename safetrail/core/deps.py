"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from safetrail.core.config import settings
from safetrail.core.security import user_id_from_token
from safetrail.db.session import get_db
from safetrail.models.user import User
from safetrail.services.sms_service import build_sms_sender
from safetrail.services.sos_service import SosDispatcher

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Require authenticated user. Raises 401 if not authenticated."""
    if not credentials:
        raise _unauthorized("Not authenticated")
    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Invalid or expired token")
    user = db.get(User, user_id)
    if not user:
        raise _unauthorized("User not found")
    return user


@lru_cache
def get_sos_dispatcher() -> SosDispatcher:
    """Process-wide dispatcher built from settings on first use."""
    return SosDispatcher.from_settings(settings, build_sms_sender(settings))
