"""Signup, login and profile endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from safetrail.core.deps import get_current_user
from safetrail.core.security import create_access_token
from safetrail.db.session import get_db
from safetrail.models.user import User
from safetrail.schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserMe
from safetrail.services.auth_service import authenticate_user, create_user, get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=AuthResponse)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    """Register a new user with no emergency contacts."""
    if get_user_by_email(db, data.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")
    user = create_user(db, data)
    logger.info("User signed up id=%s", user.id)
    return AuthResponse(user_id=user.id, name=user.name, email=user.email, phone=user.phone)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Check credentials and issue an access token."""
    user = authenticate_user(db, data.email, data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthResponse(
        user_id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        access_token=create_access_token(user.id, user.email),
        token_type="bearer",
    )


@router.get("/me", response_model=UserMe)
def me(current_user: User = Depends(get_current_user)):
    return UserMe(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        phone=current_user.phone,
        emergency_contacts=list(current_user.emergency_contacts or []),
        created_at=current_user.created_at,
    )
