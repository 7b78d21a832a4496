"""User routes: registration, login and token verification."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.auth import (
    TOKEN_COOKIE,
    create_access_token,
    get_current_user,
    get_password_hash,
    require_admin,
    verify_password,
)
from app.config import settings
from app.database import commit_or_raise, get_db
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.user import AuthResult, LoginRequest, UserCreate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/register", response_model=ApiResponse[AuthResult], status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """Create a user account and return it with a token."""
    existing = db.query(User).filter(User.email == user_data.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This email is already registered"
        )

    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        role=user_data.role,
        is_active=True
    )
    db.add(user)
    commit_or_raise(db, "create user")
    db.refresh(user)
    logger.info("User %s registered with role %s", user.email, user.role.value)

    return {
        "message": "User created successfully",
        "data": {"access_token": create_access_token(user), "token_type": "bearer", "user": user},
    }


@router.post("/login", response_model=ApiResponse[AuthResult])
async def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """Exchange email and password for a signed access token."""
    logger.info("Login attempt for %s", credentials.email)
    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or not user.is_active or not verify_password(credentials.password, user.hashed_password):
        logger.info("Login failed for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token(user)
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return {
        "message": "Login successful",
        "data": {"access_token": token, "token_type": "bearer", "user": user},
    }


@router.get("/verify", response_model=ApiResponse[UserResponse])
async def verify_token(current_user: User = Depends(get_current_user)):
    """Confirm the token is valid and return its user."""
    return {"data": current_user}


@router.get("/profile", response_model=ApiResponse[UserResponse])
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return {"data": current_user}


@router.get("/", response_model=ApiResponse[List[UserResponse]])
async def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """List all users, newest first (admin only)."""
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return {"data": users}
